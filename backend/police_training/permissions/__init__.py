# Overview: Permission catalogue and default role grants.

from .categories import PermissionCategory
from .definitions import PERMISSION_DEFINITIONS
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import get_all_permission_codes, undefined_permission_codes

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_all_permission_codes",
    "undefined_permission_codes",
]
