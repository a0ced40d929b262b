# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "View user accounts",
        PermissionCategory.USERS,
    ),
    (
        "MANAGE_USERS",
        "Manage Users",
        "Edit and delete user accounts",
        PermissionCategory.USERS,
    ),
]


# -- OFFICERS --

OFFICER_PERMISSIONS = [
    (
        "VIEW_OFFICERS",
        "View Officers",
        "View officer records",
        PermissionCategory.OFFICERS,
    ),
    (
        "MANAGE_OFFICERS",
        "Manage Officers",
        "Create, edit and delete officer records",
        PermissionCategory.OFFICERS,
    ),
]


# -- REFERENCE DATA --

REFERENCE_DATA_PERMISSIONS = [
    (
        "VIEW_REFERENCE_DATA",
        "View Reference Data",
        "View regions, formations, postings, ranks and training lookups",
        PermissionCategory.REFERENCE_DATA,
    ),
    (
        "MANAGE_REFERENCE_DATA",
        "Manage Reference Data",
        "Create and edit regions, formations, postings, ranks and training lookups",
        PermissionCategory.REFERENCE_DATA,
    ),
]


# -- WORKSHOPS --

WORKSHOP_PERMISSIONS = [
    (
        "VIEW_WORKSHOPS",
        "View Workshops",
        "View the workshop catalogue",
        PermissionCategory.WORKSHOPS,
    ),
    (
        "MANAGE_WORKSHOPS",
        "Manage Workshops",
        "Create, edit and delete workshops",
        PermissionCategory.WORKSHOPS,
    ),
]


# -- SESSIONS --

SESSION_PERMISSIONS = [
    (
        "VIEW_SESSIONS",
        "View Training Sessions",
        "View scheduled training sessions",
        PermissionCategory.SESSIONS,
    ),
    (
        "MANAGE_SESSIONS",
        "Manage Training Sessions",
        "Schedule, reschedule and cancel training sessions",
        PermissionCategory.SESSIONS,
    ),
]


# -- ENROLLMENTS --

ENROLLMENT_PERMISSIONS = [
    (
        "VIEW_ENROLLMENTS",
        "View Enrollments",
        "View enrollments, attendance and certificates",
        PermissionCategory.ENROLLMENTS,
    ),
    (
        "MANAGE_ENROLLMENTS",
        "Manage Enrollments",
        "Enroll officers, record progress and issue certificates",
        PermissionCategory.ENROLLMENTS,
    ),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    (
        "MANAGE_PERMISSIONS",
        "Manage Permissions",
        "Grant and revoke role permissions",
        PermissionCategory.SYSTEM,
    ),
]


PERMISSION_DEFINITIONS = (
    USER_PERMISSIONS
    + OFFICER_PERMISSIONS
    + REFERENCE_DATA_PERMISSIONS
    + WORKSHOP_PERMISSIONS
    + SESSION_PERMISSIONS
    + ENROLLMENT_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
