# Overview: Flask CLI command groups for bootstrap, provisioning and maintenance.

# backend/police_training/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system create-tables
#   Create any missing tables without running migrations (dev only).
#
# Permissions (roles and permissions are only managed here):
# - python -m flask perms init
#   Create permission codes, default roles and their grants. Idempotent.
# - python -m flask perms list [--role admin]
# - python -m flask perms grant facilitator MANAGE_WORKSHOPS [MORE_CODES...]
# - python -m flask perms revoke facilitator MANAGE_WORKSHOPS
#
# Users:
# - python -m flask users create --first-name Ada --last-name Reyes --email ada@example.com --gender f --role admin
# - python -m flask users assign-role ada@example.com facilitator [MORE_ROLES...]
#
# Data:
# - python -m flask data seed
#   Insert default reference data (regions, ranks, statuses, ...). Existing rows are kept.
#
# Maintenance:
# - python -m flask maintenance cleanup-tokens
#   Delete expired tokens.

import click
from flask.cli import with_appcontext

from .errors import ValidationFailedError
from .extensions import db
from .models import (
    AttendanceStatus, EnrollmentStatus, Formation, Permission, Posting, ProgressStatus,
    Rank, Region, Role, TrainingCategory, TrainingStatus, TrainingType, User,
)
from .permissions import undefined_permission_codes
from .services import permission_service, token_service
from .services.auth_service import create_user


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('create-tables')
@with_appcontext
def create_tables():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created")


@click.group('perms')
def perms_group():
    """Permission inspection and provisioning commands."""


@perms_group.command('init')
@with_appcontext
def init_permissions():
    """Create permission codes, default roles and default grants."""
    roles = permission_service.create_default_roles()
    perms = permission_service.initialize_permissions()
    grants = permission_service.assign_default_role_permissions()
    click.echo(f"PASS Created {roles} roles, {perms} permissions, {grants} grants")


@perms_group.command('list')
@click.option('--role', help='Filter by role name')
@with_appcontext
def list_permissions_cli(role):
    """List all permissions, or the permissions of one role."""
    if role:
        role_obj = db.session.query(Role).filter_by(role=role).first()
        if not role_obj:
            click.echo(f"FAIL Role '{role}' not found")
            return
        codes = sorted(permission_service.permissions_for_role(role_obj.id))
        click.echo(f"Permissions for role: {role}")
        for code in codes:
            click.echo(f"  {code}")
        click.echo(f"Total: {len(codes)} permissions")
        return

    perms = db.session.query(Permission).order_by(Permission.category, Permission.code).all()
    current_category = None
    for perm in perms:
        if perm.category != current_category:
            click.echo(f"CATEGORY {perm.category}")
            current_category = perm.category
        click.echo(f"  {perm.code:<28} {perm.name}")
    click.echo(f"Total: {len(perms)} permissions")


@perms_group.command('grant')
@click.argument('role_name')
@click.argument('permission_codes', nargs=-1, required=True)
@with_appcontext
def grant_permission_cli(role_name, permission_codes):
    """Grant one or more permissions to a role."""
    unknown = undefined_permission_codes(permission_codes)
    if unknown:
        click.echo(f"FAIL Unknown permission code(s): {', '.join(unknown)}")
        return
    role = db.session.query(Role).filter_by(role=role_name).first()
    if not role:
        click.echo(f"FAIL Role '{role_name}' not found")
        return
    try:
        created = permission_service.assign_permissions_to_role(role.id, *permission_codes)
    except ValueError as e:
        click.echo(f"FAIL Error: {str(e)}")
        return
    click.echo(f"PASS Granted {created} new permission(s) to role '{role_name}'")


@perms_group.command('revoke')
@click.argument('role_name')
@click.argument('permission_code')
@with_appcontext
def revoke_permission_cli(role_name, permission_code):
    """Revoke a permission from a role."""
    try:
        revoked = permission_service.revoke_permission_from_role(role_name, permission_code)
    except ValueError as e:
        click.echo(f"FAIL Error: {str(e)}")
        return
    if revoked:
        click.echo(f"PASS Revoked '{permission_code}' from role '{role_name}'")
    else:
        click.echo(f"WARN  Permission '{permission_code}' was not granted to '{role_name}'")


@click.group('users')
def users_group():
    """User provisioning commands."""


@users_group.command('create')
@click.option('--first-name', prompt=True)
@click.option('--last-name', prompt=True)
@click.option('--email', prompt=True)
@click.option('--gender', type=click.Choice(['m', 'f']), prompt=True)
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--role', 'roles', multiple=True, help='Role to assign (repeatable)')
@click.option('--facilitator', is_flag=True, default=False)
@click.option('--officer', is_flag=True, default=False)
@with_appcontext
def create_user_cli(first_name, last_name, email, gender, password, roles, facilitator, officer):
    """Create an activated user and optionally assign roles."""
    try:
        user = create_user(
            first_name=first_name,
            last_name=last_name,
            email=email,
            gender=gender,
            password=password,
            is_activated=True,
            is_facilitator=facilitator,
            is_officer=officer,
        )
    except ValidationFailedError as e:
        for field, message in e.errors.items():
            click.echo(f"FAIL {field}: {message}")
        return

    if roles:
        try:
            permission_service.assign_role_to_user(user.id, *roles)
        except ValueError as e:
            click.echo(f"FAIL Error: {str(e)}")
            return

    click.echo(f"PASS Created user {user.id}: {email} roles={', '.join(roles) or '-'}")


@users_group.command('assign-role')
@click.argument('email')
@click.argument('role_names', nargs=-1, required=True)
@with_appcontext
def assign_role_cli(email, role_names):
    """Assign one or more roles to a user. Existing assignments are kept."""
    user = db.session.query(User).filter_by(email=email).first()
    if not user:
        click.echo(f"FAIL User '{email}' not found")
        return
    try:
        created = permission_service.assign_role_to_user(user.id, *role_names)
    except ValueError as e:
        click.echo(f"FAIL Error: {str(e)}")
        return
    click.echo(f"PASS Assigned {created} new role(s) to {email}")


DEFAULT_REFERENCE_DATA = {
    Region: [
        {"region": "Northern Region"},
        {"region": "Western Region"},
        {"region": "Southern Region"},
        {"region": "Eastern Division"},
    ],
    Posting: [
        {"posting": "Relief", "code": "REL"},
        {"posting": "Station Manager", "code": "STM"},
        {"posting": "Criminal Investigation Branch", "code": "CIB"},
    ],
    Rank: [
        {"rank": "Constable", "code": "PC", "annual_training_hours_required": 40},
        {"rank": "Corporal", "code": "CPL", "annual_training_hours_required": 40},
        {"rank": "Sergeant", "code": "SGT", "annual_training_hours_required": 32},
        {"rank": "Inspector", "code": "INSP", "annual_training_hours_required": 24},
    ],
    TrainingType: [{"type": "Mandatory"}, {"type": "Specialized"}, {"type": "Refresher"}],
    TrainingCategory: [
        {"name": "Firearms"},
        {"name": "Community Policing"},
        {"name": "Investigations"},
        {"name": "First Aid"},
    ],
    TrainingStatus: [
        {"status": "scheduled"},
        {"status": "ongoing"},
        {"status": "completed"},
        {"status": "cancelled"},
    ],
    EnrollmentStatus: [{"status": "Enrolled"}, {"status": "Withdrawn"}, {"status": "Waitlisted"}],
    AttendanceStatus: [
        {"status": "Present", "counts_as_present": True},
        {"status": "Late", "counts_as_present": True},
        {"status": "Absent", "counts_as_present": False},
        {"status": "Excused", "counts_as_present": False},
    ],
    ProgressStatus: [{"status": "Not Started"}, {"status": "In Progress"}, {"status": "Completed"}],
}

DEFAULT_FORMATIONS = {
    "Northern Region": ["Orange Walk", "Corozal"],
    "Western Region": ["San Ignacio", "Benque Viejo"],
    "Southern Region": ["Dangriga", "Punta Gorda"],
    "Eastern Division": ["Belize City", "Belmopan"],
}


@click.group('data')
def data_group():
    """Reference data commands."""


@data_group.command('seed')
@with_appcontext
def seed_data():
    """Insert default reference data; rows whose natural key already exists are skipped."""
    created = 0
    for model, rows in DEFAULT_REFERENCE_DATA.items():
        for row in rows:
            key, value = next(iter(row.items()))
            if db.session.query(model).filter(getattr(model, key) == value).first():
                continue
            db.session.add(model(**row))
            created += 1
    db.session.commit()

    for region_name, formations in DEFAULT_FORMATIONS.items():
        region = db.session.query(Region).filter_by(region=region_name).first()
        for name in formations:
            if db.session.query(Formation).filter_by(formation=name).first():
                continue
            db.session.add(Formation(formation=name, region_id=region.id))
            created += 1
    db.session.commit()

    click.echo(f"PASS Inserted {created} reference rows")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-tokens')
@with_appcontext
def cleanup_tokens_cli():
    """Delete expired activation, authentication and password-reset tokens."""
    deleted = token_service.cleanup_expired()
    click.echo(f"Deleted {deleted} expired tokens.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(perms_group)
    app.cli.add_command(users_group)
    app.cli.add_command(data_group)
    app.cli.add_command(maintenance_group)
