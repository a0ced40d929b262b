# Overview: Lookups over the static permission catalogue.

from .definitions import PERMISSION_DEFINITIONS


_BY_CODE = {perm[0]: perm for perm in PERMISSION_DEFINITIONS}


def get_all_permission_codes():
    """Every defined permission code, in catalogue order."""
    return list(_BY_CODE)


def undefined_permission_codes(codes):
    return [code for code in codes if code not in _BY_CODE]
