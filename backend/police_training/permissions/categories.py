# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Groups shown by `flask perms list`."""
    USERS = "USERS"
    OFFICERS = "OFFICERS"
    REFERENCE_DATA = "REFERENCE_DATA"
    WORKSHOPS = "WORKSHOPS"
    SESSIONS = "SESSIONS"
    ENROLLMENTS = "ENROLLMENTS"
    SYSTEM = "SYSTEM"
