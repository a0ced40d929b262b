from __future__ import annotations

from ..extensions import db
from ..time_utils import utcnow, to_utc_z


class User(db.Model):
    """
    Application user.

    Accounts start unactivated; the activation token mailed at
    registration flips is_activated. `version` is the optimistic
    concurrency token and is advanced by the mapper on every UPDATE.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(254), nullable=False)
    gender = db.Column(db.String(1), nullable=False)

    # bcrypt hash; never serialized
    password_hash = db.Column(db.LargeBinary, nullable=False)

    is_activated = db.Column(db.Boolean, nullable=False, default=False)
    is_facilitator = db.Column(db.Boolean, nullable=False, default=False)
    is_officer = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version = db.Column(db.Integer, nullable=False)

    roles = db.relationship("Role", secondary="users_roles", lazy="selectin", back_populates="users")

    __mapper_args__ = {"version_id_col": version}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "gender": self.gender,
            "activated": self.is_activated,
            "facilitator": self.is_facilitator,
            "is_officer": self.is_officer,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version": self.version,
        }


class Role(db.Model):
    __tablename__ = "roles"
    __table_args__ = (
        db.UniqueConstraint("role", name="uq_roles_role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    role = db.Column(db.String(50), nullable=False)

    users = db.relationship("User", secondary="users_roles", lazy="selectin", back_populates="roles")
    permissions = db.relationship("Permission", secondary="roles_permissions", lazy="selectin")

    def to_dict(self) -> dict:
        return {"id": self.id, "role": self.role}


class Permission(db.Model):
    __tablename__ = "permissions"
    __table_args__ = (
        db.UniqueConstraint("code", name="uq_permissions_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(128), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(64), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "description": self.description,
            "category": self.category,
        }


class UserRole(db.Model):
    """users <-> roles link. Composite primary key makes re-assignment a no-op conflict."""
    __tablename__ = "users_roles"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)


class RolePermission(db.Model):
    __tablename__ = "roles_permissions"

    role_id = db.Column(db.Integer, db.ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    permission_id = db.Column(db.Integer, db.ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True)


class Token(db.Model):
    """
    Hashed bearer token.

    Only the SHA-256 of the plaintext is stored; the plaintext is handed
    to the client once at issuance. Scope restricts where a token can be
    redeemed.
    """
    __tablename__ = "tokens"
    __table_args__ = (
        db.Index("ix_tokens_user_scope", "user_id", "scope"),
    )

    hash = db.Column(db.LargeBinary(32), primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expiry = db.Column(db.DateTime, nullable=False)
    scope = db.Column(db.String(32), nullable=False)

    user = db.relationship("User")
