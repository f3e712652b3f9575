"""
Platform-wide exception hierarchy.

Every service operation either returns its payload or raises exactly one of
the types below. Blueprints never build error bodies for these themselves:
``gcg_hub.blueprints.errors`` registers one handler per type and maps it to
an HTTP status and a machine-readable code.

Usage:
    from gcg_hub.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="ChecklistItem", resource_id=42)
    raise ValidationError("Year is required", details={"year": "missing"})
"""


class GCGHubError(Exception):
    """Base class for all domain errors raised by the service layer."""


# ── Input / data errors ─────────────────────────────────────────────────────


class ValidationError(GCGHubError):
    """Input is missing, malformed, or breaks a business rule.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ReferentialError(GCGHubError):
    """A referenced parent entity (Year, Aspect, ChecklistItem, ...) is absent."""

    def __init__(self, resource: str, reference: int | str | None = None, message: str | None = None) -> None:
        self.resource = resource
        self.reference = reference
        if message is None:
            message = f"{resource} does not exist"
            if reference is not None:
                message = f"{resource} {reference!r} does not exist"
        super().__init__(message)


class DuplicateError(GCGHubError):
    """An operation would violate a uniqueness key.

    Args:
        resource: Model name.
        field: The unique field (or composite key label) that would be duplicated.
        value: The conflicting value.
    """

    def __init__(self, resource: str, field: str, value=None, message: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(message or f"{resource} with {field}={value!r} already exists")


class NotFoundError(GCGHubError):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable model/entity name (e.g. "Year", "Assignment").
        resource_id: The key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ConflictError(GCGHubError):
    """Delete blocked because dependent records still exist.

    Args:
        resource: Model name of the record that could not be deleted.
        dependents: Mapping of dependent kind -> count (only non-zero entries matter).
    """

    def __init__(self, resource: str, dependents: dict[str, int], message: str | None = None) -> None:
        self.resource = resource
        self.dependents = {k: v for k, v in dependents.items() if v}
        self.dependent_count = sum(self.dependents.values())
        if message is None:
            parts = ", ".join(f"{v} {k}" for k, v in self.dependents.items())
            message = f"Cannot delete {resource}: it still has {parts}"
        super().__init__(message)


# ── Authorization ───────────────────────────────────────────────────────────


class ForbiddenError(GCGHubError):
    """Caller lacks the required role."""

    def __init__(self, message: str = "Admin access required") -> None:
        super().__init__(message)


class AccessDeniedError(ForbiddenError):
    """Caller's organizational unit does not cover the target resource."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


# ── Authentication ──────────────────────────────────────────────────────────


class AuthenticationError(GCGHubError):
    """Base for failures that map to HTTP 401."""


class InvalidCredentialsError(AuthenticationError):
    """Unknown user or wrong password. The message never says which."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class TokenExpiredError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Token expired")


class TokenInvalidError(AuthenticationError):
    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class UserNotFoundError(AuthenticationError):
    """Token is valid but its subject no longer exists."""

    def __init__(self) -> None:
        super().__init__("User not found")


class WrongCurrentPasswordError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Current password is incorrect")


# ── Infrastructure ──────────────────────────────────────────────────────────


class StoreUnavailableError(GCGHubError):
    """The relational store could not be reached or timed out."""

    def __init__(self, message: str = "Database unavailable") -> None:
        super().__init__(message)
