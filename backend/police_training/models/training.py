from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow, to_utc_z, to_iso


def _next_timestamp(current):
    return utcnow()


class Officer(db.Model):
    """
    Police officer record linked one-to-one to a user account.

    updated_at doubles as the concurrency token: every UPDATE is issued
    as ... WHERE id = ? AND updated_at = ? and sets a fresh timestamp.
    """
    __tablename__ = "officers"
    __table_args__ = (
        db.UniqueConstraint("regulation_number", name="uq_officers_regulation_number"),
        db.UniqueConstraint("user_id", name="uq_officers_user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    regulation_number = db.Column(db.String(50), nullable=False)
    posting_id = db.Column(db.Integer, db.ForeignKey("postings.id"), nullable=False, index=True)
    rank_id = db.Column(db.Integer, db.ForeignKey("ranks.id"), nullable=False, index=True)
    formation_id = db.Column(db.Integer, db.ForeignKey("formations.id"), nullable=False, index=True)
    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False)

    __mapper_args__ = {"version_id_col": updated_at, "version_id_generator": _next_timestamp}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "regulation_number": self.regulation_number,
            "posting_id": self.posting_id,
            "rank_id": self.rank_id,
            "formation_id": self.formation_id,
            "region_id": self.region_id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at, precise=True),
        }


class Workshop(db.Model):
    __tablename__ = "workshops"
    __table_args__ = (
        db.UniqueConstraint("workshop_name", name="uq_workshops_workshop_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    workshop_name = db.Column(db.String(200), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("training_categories.id"), nullable=False, index=True)
    training_type_id = db.Column(db.Integer, db.ForeignKey("training_types.id"), nullable=False, index=True)
    credit_hours = db.Column(db.Integer, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)
    objectives = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False)

    __mapper_args__ = {"version_id_col": updated_at, "version_id_generator": _next_timestamp}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "workshop_name": self.workshop_name,
            "category_id": self.category_id,
            "training_type_id": self.training_type_id,
            "credit_hours": self.credit_hours,
            "description": self.description,
            "objectives": self.objectives,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at, precise=True),
        }


class TrainingSession(db.Model):
    __tablename__ = "training_sessions"
    __table_args__ = (
        db.CheckConstraint("end_time > start_time", name="ck_training_sessions_time_order"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    formation_id = db.Column(db.Integer, db.ForeignKey("formations.id"), nullable=False, index=True)
    region_id = db.Column(db.Integer, db.ForeignKey("regions.id"), nullable=False, index=True)
    facilitator_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    workshop_id = db.Column(db.Integer, db.ForeignKey("workshops.id"), nullable=False, index=True)
    session_date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    location = db.Column(db.String(1000), nullable=True)
    max_capacity = db.Column(db.Integer, nullable=True)
    training_status_id = db.Column(db.Integer, db.ForeignKey("training_status.id"), nullable=False, index=True)
    notes = db.Column(db.String(2000), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False)

    __mapper_args__ = {"version_id_col": updated_at, "version_id_generator": _next_timestamp}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "formation_id": self.formation_id,
            "region_id": self.region_id,
            "facilitator_id": self.facilitator_id,
            "workshop_id": self.workshop_id,
            "session_date": to_iso(self.session_date),
            "start_time": to_iso(self.start_time),
            "end_time": to_iso(self.end_time),
            "location": self.location,
            "max_capacity": self.max_capacity,
            "training_status_id": self.training_status_id,
            "notes": self.notes,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at, precise=True),
        }


class TrainingEnrollment(db.Model):
    __tablename__ = "training_enrollments"
    __table_args__ = (
        db.UniqueConstraint("officer_id", "session_id", name="uq_training_enrollments_officer_session"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    officer_id = db.Column(db.Integer, db.ForeignKey("officers.id"), nullable=False, index=True)
    session_id = db.Column(db.Integer, db.ForeignKey("training_sessions.id"), nullable=False, index=True)
    enrollment_status_id = db.Column(db.Integer, db.ForeignKey("enrollment_statuses.id"), nullable=False)
    attendance_status_id = db.Column(db.Integer, db.ForeignKey("attendance_statuses.id"), nullable=True)
    progress_status_id = db.Column(db.Integer, db.ForeignKey("progress_statuses.id"), nullable=False)
    completion_date = db.Column(db.Date, nullable=True)
    certificate_issued = db.Column(db.Boolean, nullable=False, default=False)
    certificate_number = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False)

    __mapper_args__ = {"version_id_col": updated_at, "version_id_generator": _next_timestamp}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "officer_id": self.officer_id,
            "session_id": self.session_id,
            "enrollment_status_id": self.enrollment_status_id,
            "attendance_status_id": self.attendance_status_id,
            "progress_status_id": self.progress_status_id,
            "completion_date": to_iso(self.completion_date),
            "certificate_issued": self.certificate_issued,
            "certificate_number": self.certificate_number,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at, precise=True),
        }
