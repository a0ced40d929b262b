"""Initial schema: accounts, RBAC, tokens, reference data and training records

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19

Concurrency tokens:
- users and every reference table: integer `version`
- officers, workshops, training_sessions, training_enrollments: `updated_at`
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261019_initial'
down_revision = None
branch_labels = None
depends_on = None


def _reference_table(name, *columns, unique):
    op.create_table(name,
        sa.Column('id', sa.Integer(), nullable=False),
        *columns,
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        *unique,
    )


def upgrade():
    # ==========================================================================
    # 1. ACCOUNTS AND RBAC
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('gender', sa.String(length=1), nullable=False),
        sa.Column('password_hash', sa.LargeBinary(), nullable=False),
        sa.Column('is_activated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_facilitator', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_officer', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sqlite_autoincrement=True
    )

    op.create_table('roles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('role', name='uq_roles_role'),
        sqlite_autoincrement=True
    )

    op.create_table('permissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code', name='uq_permissions_code'),
        sqlite_autoincrement=True
    )

    op.create_table('users_roles',
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'role_id'),
    )

    op.create_table('roles_permissions',
        sa.Column('role_id', sa.Integer(), nullable=False),
        sa.Column('permission_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['role_id'], ['roles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['permission_id'], ['permissions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('role_id', 'permission_id'),
    )

    op.create_table('tokens',
        sa.Column('hash', sa.LargeBinary(length=32), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('expiry', sa.DateTime(), nullable=False),
        sa.Column('scope', sa.String(length=32), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('hash'),
    )
    with op.batch_alter_table('tokens', schema=None) as batch_op:
        batch_op.create_index('ix_tokens_user_scope', ['user_id', 'scope'], unique=False)

    # ==========================================================================
    # 2. REFERENCE DATA
    # ==========================================================================
    _reference_table('regions',
        sa.Column('region', sa.String(length=150), nullable=False),
        unique=[sa.UniqueConstraint('region', name='uq_regions_region')])

    _reference_table('formations',
        sa.Column('formation', sa.String(length=150), nullable=False),
        sa.Column('region_id', sa.Integer(), sa.ForeignKey('regions.id'), nullable=False),
        unique=[sa.UniqueConstraint('formation', name='uq_formations_formation')])
    with op.batch_alter_table('formations', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_formations_region_id'), ['region_id'], unique=False)

    _reference_table('postings',
        sa.Column('posting', sa.String(length=150), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=True),
        unique=[sa.UniqueConstraint('posting', name='uq_postings_posting')])

    _reference_table('ranks',
        sa.Column('rank', sa.String(length=150), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('annual_training_hours_required', sa.Integer(), nullable=False, server_default='0'),
        unique=[
            sa.UniqueConstraint('rank', name='uq_ranks_rank'),
            sa.UniqueConstraint('code', name='uq_ranks_code'),
        ])

    _reference_table('training_types',
        sa.Column('type', sa.String(length=150), nullable=False),
        unique=[sa.UniqueConstraint('type', name='uq_training_types_type')])

    _reference_table('training_categories',
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        unique=[sa.UniqueConstraint('name', name='uq_training_categories_name')])

    _reference_table('training_status',
        sa.Column('status', sa.String(length=150), nullable=False),
        unique=[sa.UniqueConstraint('status', name='uq_training_status_status')])

    _reference_table('enrollment_statuses',
        sa.Column('status', sa.String(length=150), nullable=False),
        unique=[sa.UniqueConstraint('status', name='uq_enrollment_statuses_status')])

    _reference_table('attendance_statuses',
        sa.Column('status', sa.String(length=150), nullable=False),
        sa.Column('counts_as_present', sa.Boolean(), nullable=False, server_default=sa.false()),
        unique=[sa.UniqueConstraint('status', name='uq_attendance_statuses_status')])

    _reference_table('progress_statuses',
        sa.Column('status', sa.String(length=150), nullable=False),
        unique=[sa.UniqueConstraint('status', name='uq_progress_statuses_status')])

    # ==========================================================================
    # 3. TRAINING RECORDS
    # ==========================================================================
    op.create_table('officers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('regulation_number', sa.String(length=50), nullable=False),
        sa.Column('posting_id', sa.Integer(), nullable=False),
        sa.Column('rank_id', sa.Integer(), nullable=False),
        sa.Column('formation_id', sa.Integer(), nullable=False),
        sa.Column('region_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['posting_id'], ['postings.id'], ),
        sa.ForeignKeyConstraint(['rank_id'], ['ranks.id'], ),
        sa.ForeignKeyConstraint(['formation_id'], ['formations.id'], ),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('regulation_number', name='uq_officers_regulation_number'),
        sa.UniqueConstraint('user_id', name='uq_officers_user_id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('officers', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_officers_posting_id'), ['posting_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_officers_rank_id'), ['rank_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_officers_formation_id'), ['formation_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_officers_region_id'), ['region_id'], unique=False)

    op.create_table('workshops',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('workshop_name', sa.String(length=200), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('training_type_id', sa.Integer(), nullable=False),
        sa.Column('credit_hours', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('objectives', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['category_id'], ['training_categories.id'], ),
        sa.ForeignKeyConstraint(['training_type_id'], ['training_types.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('workshop_name', name='uq_workshops_workshop_name'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('workshops', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_workshops_category_id'), ['category_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_workshops_training_type_id'), ['training_type_id'], unique=False)

    op.create_table('training_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('formation_id', sa.Integer(), nullable=False),
        sa.Column('region_id', sa.Integer(), nullable=False),
        sa.Column('facilitator_id', sa.Integer(), nullable=False),
        sa.Column('workshop_id', sa.Integer(), nullable=False),
        sa.Column('session_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('location', sa.String(length=1000), nullable=True),
        sa.Column('max_capacity', sa.Integer(), nullable=True),
        sa.Column('training_status_id', sa.Integer(), nullable=False),
        sa.Column('notes', sa.String(length=2000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['formation_id'], ['formations.id'], ),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ),
        sa.ForeignKeyConstraint(['facilitator_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['workshop_id'], ['workshops.id'], ),
        sa.ForeignKeyConstraint(['training_status_id'], ['training_status.id'], ),
        sa.CheckConstraint('end_time > start_time', name='ck_training_sessions_time_order'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('training_sessions', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_training_sessions_formation_id'), ['formation_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_training_sessions_region_id'), ['region_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_training_sessions_facilitator_id'), ['facilitator_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_training_sessions_workshop_id'), ['workshop_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_training_sessions_training_status_id'), ['training_status_id'], unique=False)

    op.create_table('training_enrollments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('officer_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('enrollment_status_id', sa.Integer(), nullable=False),
        sa.Column('attendance_status_id', sa.Integer(), nullable=True),
        sa.Column('progress_status_id', sa.Integer(), nullable=False),
        sa.Column('completion_date', sa.Date(), nullable=True),
        sa.Column('certificate_issued', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('certificate_number', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['officer_id'], ['officers.id'], ),
        sa.ForeignKeyConstraint(['session_id'], ['training_sessions.id'], ),
        sa.ForeignKeyConstraint(['enrollment_status_id'], ['enrollment_statuses.id'], ),
        sa.ForeignKeyConstraint(['attendance_status_id'], ['attendance_statuses.id'], ),
        sa.ForeignKeyConstraint(['progress_status_id'], ['progress_statuses.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('officer_id', 'session_id', name='uq_training_enrollments_officer_session'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('training_enrollments', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_training_enrollments_officer_id'), ['officer_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_training_enrollments_session_id'), ['session_id'], unique=False)


def downgrade():
    for table in (
        'training_enrollments', 'training_sessions', 'workshops', 'officers',
        'progress_statuses', 'attendance_statuses', 'enrollment_statuses', 'training_status',
        'training_categories', 'training_types', 'ranks', 'postings', 'formations', 'regions',
        'tokens', 'roles_permissions', 'users_roles', 'permissions', 'roles', 'users',
    ):
        op.drop_table(table)
