# Overview: Declarative description of every CRUD resource exposed by the API.

"""
Each Resource ties a model to its envelope keys, writable fields, field
rules, concurrency token, natural keys, foreign keys, sort safelist and
list filters. The generic operations in services/resource_service.py
and the route modules are driven entirely by these records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from .filters import sort_safelist
from .models import (
    Region, Formation, Posting, Rank, TrainingType, TrainingCategory,
    TrainingStatus, EnrollmentStatus, AttendanceStatus, ProgressStatus,
    Officer, Workshop, TrainingSession, TrainingEnrollment, User,
)
from .validation import (
    ModelValidationPolicy,
    validate_region, validate_formation, validate_posting, validate_rank,
    validate_training_type, validate_training_category, validate_status,
    validate_officer, validate_workshop, validate_training_session,
    validate_training_enrollment, validate_user,
)


# ListFilter kinds
EQUALS = "equals"
CONTAINS = "contains"


@dataclass(frozen=True)
class ListFilter:
    """
    One query-string filter on a list endpoint.

    kind EQUALS compares the parsed value for equality; CONTAINS is a
    case-insensitive substring match. value_type is "int", "bool", "date"
    or "str" and decides how the raw query string is parsed.
    """
    param: str
    column: str
    value_type: str = "int"
    kind: str = EQUALS


@dataclass(frozen=True)
class Resource:
    name: str
    plural: str
    model: type
    writable_fields: frozenset[str]
    validate: Callable
    token_attr: str
    safelist: frozenset[str]
    default_sort: str
    default_page_size: int = 20
    unique_fields: tuple[str, ...] = ()
    references: dict = field(default_factory=dict)
    list_filters: tuple[ListFilter, ...] = ()
    create_defaults: dict = field(default_factory=dict)
    view_permission: str = "VIEW_REFERENCE_DATA"
    manage_permission: str = "MANAGE_REFERENCE_DATA"
    url_prefix: str = ""

    @property
    def create_policy(self) -> ModelValidationPolicy:
        return ModelValidationPolicy(writable_fields=self.writable_fields)

    @property
    def update_policy(self) -> ModelValidationPolicy:
        return ModelValidationPolicy(
            writable_fields=self.writable_fields,
            extra_fields=frozenset({self.token_attr}),
        )


def _reference(name, plural, model, fields, validate, safelist, default_sort, *, url_prefix, **kwargs) -> Resource:
    return Resource(
        name=name,
        plural=plural,
        model=model,
        writable_fields=frozenset(fields),
        validate=validate,
        token_attr="version",
        safelist=sort_safelist(*safelist),
        default_sort=default_sort,
        url_prefix=url_prefix,
        **kwargs,
    )


REGIONS = _reference(
    "region", "regions", Region, ["region"], validate_region,
    ["region", "id"], "region",
    url_prefix="/v1/regions",
    unique_fields=("region",),
    list_filters=(ListFilter("region", "region", "str", CONTAINS),),
)

FORMATIONS = _reference(
    "formation", "formations", Formation, ["formation", "region_id"], validate_formation,
    ["formation", "id", "region_id", "created_at"], "formation",
    url_prefix="/v1/formations",
    unique_fields=("formation",),
    references={"region_id": Region},
    list_filters=(
        ListFilter("formation", "formation", "str", CONTAINS),
        ListFilter("region_id", "region_id"),
    ),
)

POSTINGS = _reference(
    "posting", "postings", Posting, ["posting", "code"], validate_posting,
    ["posting", "id", "code", "created_at"], "posting",
    url_prefix="/v1/postings",
    unique_fields=("posting",),
    list_filters=(
        ListFilter("posting", "posting", "str", CONTAINS),
        ListFilter("code", "code", "str", CONTAINS),
    ),
)

RANKS = _reference(
    "rank", "ranks", Rank, ["rank", "code", "annual_training_hours_required"], validate_rank,
    ["rank", "code", "annual_training_hours_required", "id"], "rank",
    url_prefix="/v1/ranks",
    unique_fields=("rank", "code"),
    create_defaults={"annual_training_hours_required": 0},
    list_filters=(
        ListFilter("rank", "rank", "str", CONTAINS),
        ListFilter("code", "code", "str", CONTAINS),
    ),
)

TRAINING_TYPES = _reference(
    "training_type", "training_types", TrainingType, ["type"], validate_training_type,
    ["type", "id"], "type",
    url_prefix="/v1/training/types",
    unique_fields=("type",),
    list_filters=(ListFilter("type", "type", "str", CONTAINS),),
)

TRAINING_CATEGORIES = _reference(
    "training_category", "training_categories", TrainingCategory, ["name", "is_active"],
    validate_training_category,
    ["name", "id", "created_at"], "name",
    url_prefix="/v1/training/categories",
    unique_fields=("name",),
    create_defaults={"is_active": True},
    list_filters=(
        ListFilter("name", "name", "str", CONTAINS),
        ListFilter("is_active", "is_active", "bool"),
    ),
)

TRAINING_STATUSES = _reference(
    "training_status", "training_statuses", TrainingStatus, ["status"], validate_status,
    ["status", "id", "created_at"], "status",
    url_prefix="/v1/training/statuses",
    unique_fields=("status",),
    list_filters=(ListFilter("status", "status", "str", CONTAINS),),
)

ENROLLMENT_STATUSES = _reference(
    "enrollment_status", "enrollment_statuses", EnrollmentStatus, ["status"], validate_status,
    ["status", "id", "created_at"], "status",
    url_prefix="/v1/enrollment-statuses",
    unique_fields=("status",),
    list_filters=(ListFilter("status", "status", "str", CONTAINS),),
)

ATTENDANCE_STATUSES = _reference(
    "attendance_status", "attendance_statuses", AttendanceStatus, ["status", "counts_as_present"],
    validate_status,
    ["status", "id", "created_at"], "status",
    url_prefix="/v1/attendance-statuses",
    unique_fields=("status",),
    create_defaults={"counts_as_present": False},
    list_filters=(
        ListFilter("status", "status", "str", CONTAINS),
        ListFilter("counts_as_present", "counts_as_present", "bool"),
    ),
)

PROGRESS_STATUSES = _reference(
    "progress_status", "progress_statuses", ProgressStatus, ["status"], validate_status,
    ["status", "id", "created_at"], "status",
    url_prefix="/v1/progress-statuses",
    unique_fields=("status",),
    list_filters=(ListFilter("status", "status", "str", CONTAINS),),
)

REFERENCE_RESOURCES = (
    REGIONS, FORMATIONS, POSTINGS, RANKS, TRAINING_TYPES, TRAINING_CATEGORIES,
    TRAINING_STATUSES, ENROLLMENT_STATUSES, ATTENDANCE_STATUSES, PROGRESS_STATUSES,
)


OFFICERS = Resource(
    name="officer",
    plural="officers",
    model=Officer,
    writable_fields=frozenset({
        "regulation_number", "posting_id", "rank_id", "formation_id", "region_id", "user_id",
    }),
    validate=validate_officer,
    token_attr="updated_at",
    safelist=sort_safelist("regulation_number", "created_at", "updated_at", "id"),
    default_sort="regulation_number",
    unique_fields=("regulation_number", "user_id"),
    references={
        "posting_id": Posting,
        "rank_id": Rank,
        "formation_id": Formation,
        "region_id": Region,
        "user_id": User,
    },
    list_filters=(
        ListFilter("regulation_number", "regulation_number", "str", CONTAINS),
        ListFilter("posting_id", "posting_id"),
        ListFilter("rank_id", "rank_id"),
        ListFilter("formation_id", "formation_id"),
        ListFilter("region_id", "region_id"),
    ),
    view_permission="VIEW_OFFICERS",
    manage_permission="MANAGE_OFFICERS",
    url_prefix="/v1/officers",
)

WORKSHOPS = Resource(
    name="workshop",
    plural="workshops",
    model=Workshop,
    writable_fields=frozenset({
        "workshop_name", "category_id", "training_type_id", "credit_hours",
        "description", "objectives", "is_active",
    }),
    validate=validate_workshop,
    token_attr="updated_at",
    safelist=sort_safelist("workshop_name", "id", "created_at", "updated_at"),
    default_sort="workshop_name",
    unique_fields=("workshop_name",),
    references={"category_id": TrainingCategory, "training_type_id": TrainingType},
    create_defaults={"credit_hours": 0, "is_active": True},
    list_filters=(
        ListFilter("name", "workshop_name", "str", CONTAINS),
        ListFilter("category_id", "category_id"),
        ListFilter("training_type_id", "training_type_id"),
        ListFilter("is_active", "is_active", "bool"),
    ),
    view_permission="VIEW_WORKSHOPS",
    manage_permission="MANAGE_WORKSHOPS",
    url_prefix="/v1/workshops",
)

TRAINING_SESSIONS = Resource(
    name="training_session",
    plural="training_sessions",
    model=TrainingSession,
    writable_fields=frozenset({
        "formation_id", "region_id", "facilitator_id", "workshop_id", "session_date",
        "start_time", "end_time", "location", "max_capacity", "training_status_id", "notes",
    }),
    validate=validate_training_session,
    token_attr="updated_at",
    safelist=sort_safelist("session_date", "start_time", "end_time", "id", "created_at"),
    default_sort="session_date",
    references={
        "formation_id": Formation,
        "region_id": Region,
        "facilitator_id": User,
        "workshop_id": Workshop,
        "training_status_id": TrainingStatus,
    },
    list_filters=(
        ListFilter("formation_id", "formation_id"),
        ListFilter("region_id", "region_id"),
        ListFilter("facilitator_id", "facilitator_id"),
        ListFilter("workshop_id", "workshop_id"),
        ListFilter("training_status_id", "training_status_id"),
        ListFilter("session_date", "session_date", "date"),
        ListFilter("location", "location", "str", CONTAINS),
        ListFilter("notes", "notes", "str", CONTAINS),
    ),
    view_permission="VIEW_SESSIONS",
    manage_permission="MANAGE_SESSIONS",
    url_prefix="/v1/training/sessions",
)

TRAINING_ENROLLMENTS = Resource(
    name="training_enrollment",
    plural="training_enrollments",
    model=TrainingEnrollment,
    writable_fields=frozenset({
        "officer_id", "session_id", "enrollment_status_id", "attendance_status_id",
        "progress_status_id", "completion_date", "certificate_issued", "certificate_number",
    }),
    validate=validate_training_enrollment,
    token_attr="updated_at",
    safelist=sort_safelist("created_at", "updated_at", "completion_date", "id"),
    default_sort="created_at",
    unique_fields=("officer_id",),
    references={
        "officer_id": Officer,
        "session_id": TrainingSession,
        "enrollment_status_id": EnrollmentStatus,
        "attendance_status_id": AttendanceStatus,
        "progress_status_id": ProgressStatus,
    },
    create_defaults={"certificate_issued": False},
    list_filters=(
        ListFilter("officer_id", "officer_id"),
        ListFilter("session_id", "session_id"),
        ListFilter("enrollment_status_id", "enrollment_status_id"),
        ListFilter("progress_status_id", "progress_status_id"),
        ListFilter("certificate_issued", "certificate_issued", "bool"),
    ),
    view_permission="VIEW_ENROLLMENTS",
    manage_permission="MANAGE_ENROLLMENTS",
    url_prefix="/v1/training/enrollments",
)

USERS = Resource(
    name="user",
    plural="users",
    model=User,
    writable_fields=frozenset({
        "first_name", "last_name", "email", "gender", "is_activated", "is_facilitator", "is_officer",
    }),
    validate=validate_user,
    token_attr="version",
    safelist=sort_safelist("id", "first_name", "last_name", "email", "created_at"),
    default_sort="last_name",
    unique_fields=("email",),
    list_filters=(
        ListFilter("first_name", "first_name", "str", CONTAINS),
        ListFilter("last_name", "last_name", "str", CONTAINS),
        ListFilter("email", "email", "str", CONTAINS),
        ListFilter("gender", "gender", "str"),
        ListFilter("is_activated", "is_activated", "bool"),
        ListFilter("is_facilitator", "is_facilitator", "bool"),
        ListFilter("is_officer", "is_officer", "bool"),
    ),
    view_permission="VIEW_USERS",
    manage_permission="MANAGE_USERS",
    url_prefix="/v1/users",
)
