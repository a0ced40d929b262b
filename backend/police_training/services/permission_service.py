# Overview: Service-layer operations for roles and permissions; encapsulates RBAC lookups and grants.

"""
Role-based access control.

Users never hold permissions directly: user -> roles -> permissions. The
effective set is the union over all of a user's roles and is resolved
per request, never stored on the user row.

Provisioning (assigning roles, granting codes) is idempotent and only
reachable from the CLI.
"""

from __future__ import annotations

from flask import current_app

from ..errors import ForbiddenError
from ..extensions import db
from ..models import Permission, Role, RolePermission, UserRole
from ..permissions import PERMISSION_DEFINITIONS, DEFAULT_ROLE_PERMISSIONS


def roles_for_user(user_id: int) -> set[str]:
    rows = (
        db.session.query(Role.role)
        .join(UserRole, UserRole.role_id == Role.id)
        .filter(UserRole.user_id == user_id)
        .all()
    )
    return {row.role for row in rows}


def permissions_for_role(role_id: int) -> set[str]:
    rows = (
        db.session.query(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .filter(RolePermission.role_id == role_id)
        .all()
    )
    return {row.code for row in rows}


def get_user_permissions(user_id: int) -> set[str]:
    """Union of permission codes reachable through every role assigned to the user."""
    rows = (
        db.session.query(Permission.code)
        .join(RolePermission, RolePermission.permission_id == Permission.id)
        .join(UserRole, UserRole.role_id == RolePermission.role_id)
        .filter(UserRole.user_id == user_id)
        .distinct()
        .all()
    )
    return {row.code for row in rows}


def user_has_permission(user_id: int, permission_code: str) -> bool:
    return permission_code in get_user_permissions(user_id)


def require_permission(user_id: int, permission_code: str, resource: str | None = None) -> None:
    """
    Raise ForbiddenError unless the user holds permission_code.

    Only denials are logged.
    """
    if not user_has_permission(user_id, permission_code):
        current_app.logger.warning(
            "Permission denied: user=%s permission=%s resource=%s",
            user_id,
            permission_code,
            resource,
        )
        raise ForbiddenError()


def _roles_by_name(role_names) -> list[Role]:
    names = list(dict.fromkeys(role_names))
    roles = db.session.query(Role).filter(Role.role.in_(names)).all()
    found = {r.role for r in roles}
    missing = [n for n in names if n not in found]
    if missing:
        raise ValueError(f"Role(s) not found: {', '.join(missing)}")
    return roles


def assign_role_to_user(user_id: int, *role_names: str) -> int:
    """
    Link the user to each named role. Existing links are left alone.

    Returns the number of new links created.
    """
    roles = _roles_by_name(role_names)
    existing = {
        row.role_id
        for row in db.session.query(UserRole.role_id).filter(UserRole.user_id == user_id).all()
    }
    created = 0
    for role in roles:
        if role.id in existing:
            continue
        db.session.add(UserRole(user_id=user_id, role_id=role.id))
        created += 1
    db.session.commit()
    return created


def revoke_role_from_user(user_id: int, role_name: str) -> bool:
    role = db.session.query(Role).filter_by(role=role_name).first()
    if not role:
        raise ValueError(f"Role '{role_name}' not found")
    deleted = (
        db.session.query(UserRole)
        .filter_by(user_id=user_id, role_id=role.id)
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return bool(deleted)


def assign_permissions_to_role(role_id: int, *permission_codes: str) -> int:
    """Grant each code to the role; already-granted codes are skipped."""
    codes = list(dict.fromkeys(permission_codes))
    permissions = db.session.query(Permission).filter(Permission.code.in_(codes)).all()
    found = {p.code for p in permissions}
    missing = [c for c in codes if c not in found]
    if missing:
        raise ValueError(f"Permission(s) not found: {', '.join(missing)}")

    existing = {
        row.permission_id
        for row in db.session.query(RolePermission.permission_id).filter(RolePermission.role_id == role_id).all()
    }
    created = 0
    for permission in permissions:
        if permission.id in existing:
            continue
        db.session.add(RolePermission(role_id=role_id, permission_id=permission.id))
        created += 1
    db.session.commit()
    return created


def grant_permission_to_role(role_name: str, permission_code: str) -> int:
    role = db.session.query(Role).filter_by(role=role_name).first()
    if not role:
        raise ValueError(f"Role '{role_name}' not found")
    return assign_permissions_to_role(role.id, permission_code)


def revoke_permission_from_role(role_name: str, permission_code: str) -> bool:
    """Revoke a permission from a role. Returns False if it was not granted."""
    role = db.session.query(Role).filter_by(role=role_name).first()
    if not role:
        raise ValueError(f"Role '{role_name}' not found")

    permission = db.session.query(Permission).filter_by(code=permission_code).first()
    if not permission:
        raise ValueError(f"Permission '{permission_code}' not found")

    deleted = (
        db.session.query(RolePermission)
        .filter_by(role_id=role.id, permission_id=permission.id)
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return bool(deleted)


def create_default_roles() -> int:
    created = 0
    for role_name in DEFAULT_ROLE_PERMISSIONS:
        if not db.session.query(Role).filter_by(role=role_name).first():
            db.session.add(Role(role=role_name))
            created += 1
    db.session.commit()
    return created


def initialize_permissions() -> int:
    """
    Create Permission rows for every code in PERMISSION_DEFINITIONS.

    Idempotent: safe to run multiple times.
    """
    created_count = 0

    for code, name, description, category in PERMISSION_DEFINITIONS:
        existing = db.session.query(Permission).filter_by(code=code).first()
        if not existing:
            db.session.add(Permission(code=code, name=name, description=description, category=category))
            created_count += 1

    db.session.commit()
    return created_count


def assign_default_role_permissions() -> int:
    created_count = 0
    for role_name, permission_codes in DEFAULT_ROLE_PERMISSIONS.items():
        role = db.session.query(Role).filter_by(role=role_name).first()
        if not role:
            continue
        created_count += assign_permissions_to_role(role.id, *permission_codes)
    return created_count
