"""Shared utility functions for services and blueprints.

parse_date:       lenient date parsing (returns None on bad input)
parse_date_input: strict date parsing (raises ValidationError)
parse_year:       book-year parsing with range check
parse_int:        positive integer id parsing
commit_or_raise:  commit the session, translating store failures to domain errors
"""
import logging
from datetime import date, datetime

from sqlalchemy.exc import IntegrityError, OperationalError

from gcg_hub.core.exceptions import DuplicateError, StoreUnavailableError, ValidationError
from gcg_hub.models import db

logger = logging.getLogger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - DD.MM.YYYY
    """
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(str(value), "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


def parse_date_input(value, field="due_date"):
    """Parse a date, raising ValidationError on non-empty bad input."""
    if value in (None, ""):
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError(
            "Invalid date format. Use YYYY-MM-DD or DD.MM.YYYY.",
            details={field: "invalid date"},
        )
    return parsed


def parse_int(value, field):
    """Parse a required integer field; bool and non-numeric input are rejected."""
    if value is None or value == "":
        raise ValidationError(f"{field} is required", details={field: "missing"})
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field} format", details={field: "not an integer"})
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        raise ValidationError(f"Invalid {field} format", details={field: "not an integer"}) from None


_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off")


def parse_bool(value, field):
    """Parse a flag from JSON or form input; anything unrecognised is rejected."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValidationError(f"Invalid {field} value", details={field: "not a boolean"})


def parse_year(value, field="year"):
    """Parse a book year and enforce the 1900..2100 range."""
    year = parse_int(value, field)
    if year < MIN_YEAR or year > MAX_YEAR:
        raise ValidationError(
            f"Invalid year format ({MIN_YEAR}-{MAX_YEAR})",
            details={field: "out of range"},
        )
    return year


def require_text(data: dict, *fields):
    """Return stripped values for ``fields``; raise one ValidationError listing all missing ones."""
    values = []
    missing = {}
    for field in fields:
        raw = data.get(field)
        text = raw.strip() if isinstance(raw, str) else raw
        if text in (None, ""):
            missing[field] = "missing"
        values.append(text)
    if missing:
        raise ValidationError(
            f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
            details=missing,
        )
    return values


def optional_text(value):
    """Normalise an optional text field: blank strings become None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


# ── Database commit helper ───────────────────────────────────────────────────

def commit_or_raise(resource="Record"):
    """Commit the current SQLAlchemy session or raise a domain error.

    IntegrityError   → DuplicateError (a uniqueness race lost at the store)
    OperationalError → StoreUnavailableError (connection / lock issues)

    The session is rolled back before raising so no partial mutation stays
    visible to the rest of the request.
    """
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Integrity error on commit resource=%s: %s", resource, exc.orig)
        raise DuplicateError(resource, "unique key", message=f"{resource} violates a uniqueness constraint") from exc
    except OperationalError as exc:
        db.session.rollback()
        logger.exception("Database operational error on commit resource=%s", resource)
        raise StoreUnavailableError() from exc


# ── Query-string filter helpers ──────────────────────────────────────────────

def filter_value(value):
    """Query-string value for an optional filter; blank and ``"all"`` mean unset."""
    if value is None:
        return None
    value = str(value).strip()
    if not value or value.lower() == "all":
        return None
    return value


def filter_int(value, field):
    value = filter_value(value)
    return None if value is None else parse_int(value, field)


def ilike_pattern(text):
    """Case-insensitive substring pattern with LIKE wildcards escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
