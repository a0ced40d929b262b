"""
Pytest fixtures for the police training backend tests.

Provides an in-memory database, seeded roles/permissions, users with
bearer tokens for each default role, and the reference rows most record
types depend on.
"""

import pytest

from police_training import create_app
from police_training.extensions import db
from police_training.models import (
    AttendanceStatus, EnrollmentStatus, Formation, Posting, ProgressStatus, Rank,
    Region, TrainingCategory, TrainingStatus, TrainingType, User,
)
from police_training.services import permission_service, token_service
from police_training.services.auth_service import hash_password


PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'MAIL_ENABLED': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='session')
def password_hash():
    # bcrypt at cost 12 is slow; hash once per run
    return hash_password(PASSWORD)


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table before the test and discard the identity map."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()

    yield db.session

    db.session.rollback()
    db.session.expunge_all()


@pytest.fixture(scope='function')
def setup_roles(db_session):
    """Setup default roles and permissions."""
    permission_service.create_default_roles()
    permission_service.initialize_permissions()
    permission_service.assign_default_role_permissions()


def make_user(password_hash, email, *, activated=True, roles=(), first_name="Test", last_name="User"):
    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        gender="f",
        password_hash=password_hash,
        is_activated=activated,
    )
    db.session.add(user)
    db.session.commit()
    if roles:
        permission_service.assign_role_to_user(user.id, *roles)
    return user


def bearer(user) -> dict:
    token = token_service.issue_token(user.id, token_service.AUTHENTICATION_TTL, token_service.SCOPE_AUTHENTICATION)
    return {'Authorization': f'Bearer {token.plaintext}'}


@pytest.fixture(scope='function')
def admin_user(setup_roles, password_hash):
    return make_user(password_hash, "admin@example.com", roles=("admin",), first_name="Ada", last_name="Admin")


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture(scope='function')
def officer_user(setup_roles, password_hash):
    return make_user(password_hash, "officer@example.com", roles=("officer",), first_name="Owen", last_name="Officer")


@pytest.fixture(scope='function')
def officer_headers(officer_user):
    return bearer(officer_user)


@pytest.fixture(scope='function')
def reference_data(db_session):
    """One row of every reference table, keyed by table name."""
    region = Region(region="Northern Region")
    db_session.add(region)
    db_session.flush()

    rows = {
        "region": region,
        "formation": Formation(formation="Orange Walk", region_id=region.id),
        "posting": Posting(posting="Relief", code="REL"),
        "rank": Rank(rank="Constable", code="PC", annual_training_hours_required=40),
        "training_type": TrainingType(type="Mandatory"),
        "training_category": TrainingCategory(name="Firearms"),
        "training_status": TrainingStatus(status="scheduled"),
        "enrollment_status": EnrollmentStatus(status="Enrolled"),
        "attendance_status": AttendanceStatus(status="Present", counts_as_present=True),
        "progress_status": ProgressStatus(status="In Progress"),
    }
    db_session.add_all(rows.values())
    db_session.commit()
    return {key: row.id for key, row in rows.items()}


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
