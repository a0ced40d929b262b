from __future__ import annotations

from sqlalchemy.orm import declared_attr

from ..extensions import db
from ..time_utils import utcnow, to_utc_z


class ReferenceRecord:
    """
    Columns shared by every reference-data table.

    `version` is the optimistic concurrency token.
    """

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    version = db.Column(db.Integer, nullable=False)

    @declared_attr
    def __mapper_args__(cls):
        return {"version_id_col": cls.version}

    def _base_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": to_utc_z(self.created_at),
            "version": self.version,
        }


class Region(ReferenceRecord, db.Model):
    __tablename__ = "regions"
    __table_args__ = (db.UniqueConstraint("region", name="uq_regions_region"),)

    region = db.Column(db.String(150), nullable=False)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "region": self.region}


class Formation(ReferenceRecord, db.Model):
    __tablename__ = "formations"
    __table_args__ = (db.UniqueConstraint("formation", name="uq_formations_formation"),)

    formation = db.Column(db.String(150), nullable=False)
    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=False, index=True)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "formation": self.formation, "region_id": self.region_id}


class Posting(ReferenceRecord, db.Model):
    __tablename__ = "postings"
    __table_args__ = (db.UniqueConstraint("posting", name="uq_postings_posting"),)

    posting = db.Column(db.String(150), nullable=False)
    code = db.Column(db.String(20), nullable=True)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "posting": self.posting, "code": self.code}


class Rank(ReferenceRecord, db.Model):
    __tablename__ = "ranks"
    __table_args__ = (
        db.UniqueConstraint("rank", name="uq_ranks_rank"),
        db.UniqueConstraint("code", name="uq_ranks_code"),
    )

    rank = db.Column(db.String(150), nullable=False)
    code = db.Column(db.String(20), nullable=False)
    annual_training_hours_required = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self) -> dict:
        return {
            **self._base_dict(),
            "rank": self.rank,
            "code": self.code,
            "annual_training_hours_required": self.annual_training_hours_required,
        }


class TrainingType(ReferenceRecord, db.Model):
    __tablename__ = "training_types"
    __table_args__ = (db.UniqueConstraint("type", name="uq_training_types_type"),)

    type = db.Column(db.String(150), nullable=False)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "type": self.type}


class TrainingCategory(ReferenceRecord, db.Model):
    __tablename__ = "training_categories"
    __table_args__ = (db.UniqueConstraint("name", name="uq_training_categories_name"),)

    name = db.Column(db.String(150), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "name": self.name, "is_active": self.is_active}


class TrainingStatus(ReferenceRecord, db.Model):
    __tablename__ = "training_status"
    __table_args__ = (db.UniqueConstraint("status", name="uq_training_status_status"),)

    status = db.Column(db.String(150), nullable=False)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "status": self.status}


class EnrollmentStatus(ReferenceRecord, db.Model):
    __tablename__ = "enrollment_statuses"
    __table_args__ = (db.UniqueConstraint("status", name="uq_enrollment_statuses_status"),)

    status = db.Column(db.String(150), nullable=False)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "status": self.status}


class AttendanceStatus(ReferenceRecord, db.Model):
    __tablename__ = "attendance_statuses"
    __table_args__ = (db.UniqueConstraint("status", name="uq_attendance_statuses_status"),)

    status = db.Column(db.String(150), nullable=False)
    counts_as_present = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "status": self.status, "counts_as_present": self.counts_as_present}


class ProgressStatus(ReferenceRecord, db.Model):
    __tablename__ = "progress_statuses"
    __table_args__ = (db.UniqueConstraint("status", name="uq_progress_statuses_status"),)

    status = db.Column(db.String(150), nullable=False)

    def to_dict(self) -> dict:
        return {**self._base_dict(), "status": self.status}
