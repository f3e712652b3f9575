"""
User Service — registration, profile updates, deletion.

Only admins register users. A user may edit their own profile; role changes
and edits of other users need an admin.
"""

import logging
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import or_

from gcg_hub.core.exceptions import ConflictError, DuplicateError, NotFoundError, ValidationError
from gcg_hub.models import db
from gcg_hub.models.auth import ROLE_USER, ROLES, User
from gcg_hub.services import access_service
from gcg_hub.services.auth_service import enforce_password_policy, hash_for_storage
from gcg_hub.utils.helpers import commit_or_raise, filter_value, ilike_pattern, optional_text, require_text

logger = logging.getLogger(__name__)

ORG_FIELDS = ("directorate", "sub_directorate", "division")


@dataclass
class UserFilter:
    role: str | None = None
    directorate: str | None = None
    sub_directorate: str | None = None
    search: str | None = None

    @classmethod
    def from_args(cls, args):
        return cls(
            role=filter_value(args.get("role")),
            directorate=filter_value(args.get("directorate")),
            sub_directorate=filter_value(args.get("sub_directorate")),
            search=filter_value(args.get("search")),
        )

    def apply(self, query):
        if self.role:
            query = query.filter(User.role == self.role.upper())
        if self.directorate:
            query = query.filter(User.directorate == self.directorate)
        if self.sub_directorate:
            query = query.filter(User.sub_directorate == self.sub_directorate)
        if self.search:
            pattern = ilike_pattern(self.search)
            query = query.filter(or_(
                User.name.ilike(pattern, escape="\\"),
                User.username.ilike(pattern, escape="\\"),
                User.email.ilike(pattern, escape="\\"),
            ))
        return query


def _normalize_email(email: str) -> str:
    try:
        return validate_email(email, check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email: {e}", details={"email": "invalid"}) from None


def _normalize_role(role) -> str:
    role = (role or ROLE_USER).strip().upper()
    if role not in ROLES:
        raise ValidationError(
            f"Invalid role. Must be one of: {', '.join(ROLES)}",
            details={"role": "invalid"},
        )
    return role


def _ensure_email_free(email: str, exclude_id=None):
    query = User.query.filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    if query.first():
        raise DuplicateError("User", "email", email, message="Email already exists")


# ═══════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════
def list_users(filters: UserFilter | None = None):
    query = (filters or UserFilter()).apply(User.query)
    return query.order_by(User.role.asc(), User.name.asc()).all()


def get_user(user_id) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def get_user_for(identity, user_id) -> User:
    access_service.check_user_access(identity, user_id)
    return get_user(user_id)


# ═══════════════════════════════════════════════════════════════
# Mutations
# ═══════════════════════════════════════════════════════════════
def register_user(data: dict) -> User:
    """Create a user account (admin operation).

    Raises:
        ValidationError: required fields missing, weak password, bad email or role.
        DuplicateError: username or email already taken.
    """
    username, email, password, name = require_text(data, "username", "email", "password", "name")
    enforce_password_policy(password)
    email = _normalize_email(email)
    role = _normalize_role(data.get("role"))

    existing = User.query.filter(or_(User.username == username, User.email == email)).first()
    if existing:
        if existing.username == username:
            raise DuplicateError("User", "username", username, message="Username already exists")
        raise DuplicateError("User", "email", email, message="Email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=hash_for_storage(password),
        name=name,
        role=role,
        **{field: optional_text(data.get(field)) for field in ORG_FIELDS},
    )
    db.session.add(user)
    commit_or_raise("User")
    logger.info("User registered id=%s role=%s", user.id, role)
    return user


def update_user(identity, user_id, data: dict) -> User:
    """Edit name, email, org attributes and (admins only) role."""
    changing_role = bool(data.get("role"))
    access_service.check_user_access(identity, user_id, changing_role=changing_role)
    user = get_user(user_id)
    _apply_profile(user, data)
    if changing_role:
        user.role = _normalize_role(data["role"])
    commit_or_raise("User")
    logger.info("User updated id=%s by=%s", user.id, identity.id)
    return user


def update_profile(identity, data: dict) -> User:
    """Self-service edit; the role field is ignored here."""
    user = get_user(identity.id)
    _apply_profile(user, data)
    commit_or_raise("User")
    logger.info("Profile updated id=%s", user.id)
    return user


def _apply_profile(user: User, data: dict) -> None:
    name = optional_text(data.get("name"))
    if name:
        user.name = name
    if data.get("email"):
        email = _normalize_email(str(data["email"]).strip())
        if email != user.email:
            _ensure_email_free(email, exclude_id=user.id)
            user.email = email
    for field in ORG_FIELDS:
        if field in data:
            setattr(user, field, optional_text(data[field]))


def delete_user(identity, user_id) -> None:
    """Admins delete users that own no files or assignments, never themselves."""
    access_service.require_admin(identity)
    user = get_user(user_id)
    if user.id == identity.id:
        raise ValidationError("Cannot delete your own account", details={"id": "self"})
    dependents = {
        "file_records": user.file_records.count(),
        "assignments": user.assignments_made.count(),
    }
    if any(dependents.values()):
        raise ConflictError(
            "User",
            dependents,
            message="Cannot delete user with existing data. Please reassign or delete related data first.",
        )
    db.session.delete(user)
    commit_or_raise("User")
    logger.info("User deleted id=%s by=%s", user_id, identity.id)
