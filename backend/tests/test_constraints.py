"""
Constraint translation tests.

Driver codes are exercised with stand-in PostgreSQL errors; the SQLite
paths use real violations against the test database.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from police_training.constraints import ConstraintKind, classify, translate
from police_training.errors import DuplicateValueError, ForeignKeyViolationError
from police_training.extensions import db
from police_training.models import Formation, Rank, Region
from police_training.services.concurrency import commit_or_translate


class FakeDiag:
    def __init__(self, constraint_name, message_detail=""):
        self.constraint_name = constraint_name
        self.message_detail = message_detail


class FakePgError(Exception):
    def __init__(self, pgcode, constraint_name, detail=""):
        super().__init__("pg error")
        self.pgcode = pgcode
        self.diag = FakeDiag(constraint_name, detail)


def integrity_error(orig):
    return IntegrityError("INSERT ...", {}, orig)


class TestClassifyPostgres:

    def test_unique_violation(self):
        exc = integrity_error(FakePgError("23505", "uq_officers_regulation_number"))
        violation = classify(exc)
        assert violation.kind is ConstraintKind.DUPLICATE_VALUE
        assert violation.mentions("regulation_number")
        assert not violation.mentions("user_id")

    def test_foreign_key_violation(self):
        exc = integrity_error(FakePgError(
            "23503", "officers_rank_id_fkey", 'Key (rank_id)=(99) is not present in table "ranks".'
        ))
        violation = classify(exc)
        assert violation.kind is ConstraintKind.FOREIGN_KEY_VIOLATION
        assert violation.mentions("rank_id")

    def test_other_code(self):
        exc = integrity_error(FakePgError("23514", "training_sessions_time_check"))
        assert classify(exc).kind is ConstraintKind.OTHER

    def test_translate_blames_named_unique_field(self):
        exc = integrity_error(FakePgError("23505", "uq_officers_user_id"))
        err = translate(exc, unique_fields=("regulation_number", "user_id"))
        assert isinstance(err, DuplicateValueError)
        assert err.errors == {"user_id": "a record with this value already exists"}

    def test_translate_blames_named_reference(self):
        exc = integrity_error(FakePgError("23503", "officers_rank_id_fkey"))
        err = translate(exc, references={"posting_id": (None, 1), "rank_id": (None, 99)})
        assert isinstance(err, ForeignKeyViolationError)
        assert err.errors == {"rank_id": "must reference an existing record"}

    def test_unclassified_is_returned_unchanged(self):
        exc = integrity_error(FakePgError("23514", "some_check"))
        assert translate(exc, unique_fields=("name",)) is exc


class TestClassifyMessageFallback:

    def test_unique_message(self):
        exc = integrity_error(Exception("UNIQUE constraint failed: ranks.code"))
        violation = classify(exc)
        assert violation.kind is ConstraintKind.DUPLICATE_VALUE
        assert violation.detail == "code"

    def test_foreign_key_message(self):
        exc = integrity_error(Exception("FOREIGN KEY constraint failed"))
        assert classify(exc).kind is ConstraintKind.FOREIGN_KEY_VIOLATION


class TestSqliteViolations:

    def test_duplicate_reports_the_colliding_column(self, db_session):
        db_session.add(Rank(rank="Constable", code="PC"))
        db_session.commit()

        db_session.add(Rank(rank="Police Constable", code="PC"))
        with pytest.raises(DuplicateValueError) as excinfo:
            commit_or_translate(unique_fields=("rank", "code"))
        assert excinfo.value.errors == {"code": "a record with this value already exists"}

    def test_missing_reference_reports_the_field(self, db_session):
        formation = Formation(formation="Belize City", region_id=999)
        db_session.add(formation)
        with pytest.raises(ForeignKeyViolationError) as excinfo:
            commit_or_translate(
                unique_fields=("formation",),
                references={"region_id": (Region, 999)},
            )
        assert excinfo.value.errors == {"region_id": "must reference an existing record"}

    def test_session_usable_after_translation(self, db_session):
        db_session.add(Region(region="Southern"))
        db_session.commit()
        db_session.add(Region(region="Southern"))
        with pytest.raises(DuplicateValueError):
            commit_or_translate(unique_fields=("region",))

        assert db.session.query(Region).count() == 1
