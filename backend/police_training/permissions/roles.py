# Overview: Default role -> permission grants applied by `flask perms init`.

from .helpers import get_all_permission_codes


DEFAULT_ROLE_PERMISSIONS = {
    "admin": get_all_permission_codes(),
    "facilitator": [
        "VIEW_OFFICERS",
        "VIEW_REFERENCE_DATA",
        "VIEW_WORKSHOPS",
        "VIEW_SESSIONS",
        "MANAGE_SESSIONS",
        "VIEW_ENROLLMENTS",
        "MANAGE_ENROLLMENTS",
    ],
    "officer": [
        "VIEW_REFERENCE_DATA",
        "VIEW_WORKSHOPS",
        "VIEW_SESSIONS",
    ],
}
