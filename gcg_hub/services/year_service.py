"""Year service — book-year CRUD.

A year is addressed by its natural key ``year_number``. Deletion is refused
while any aspect, checklist item or org unit still belongs to the year.
"""
import logging

from gcg_hub.core.exceptions import ConflictError, DuplicateError, NotFoundError
from gcg_hub.models import db
from gcg_hub.models.compliance import Aspect, ChecklistItem, OrgUnit, Year
from gcg_hub.utils.helpers import commit_or_raise, optional_text, parse_bool, parse_year

logger = logging.getLogger(__name__)


def list_years():
    return Year.query.order_by(Year.year_number.desc()).all()


def get_year(year_number) -> Year:
    year = Year.query.filter_by(year_number=year_number).first()
    if year is None:
        raise NotFoundError("Year", year_number)
    return year


def create_year(data: dict) -> Year:
    """Create a book year; name and description default from the number."""
    year_number = parse_year(data.get("year"))
    if Year.query.filter_by(year_number=year_number).first():
        raise DuplicateError("Year", "year", year_number, message="Year already exists")

    year = Year(
        year_number=year_number,
        name=optional_text(data.get("name")) or f"Tahun Buku {year_number}",
        description=optional_text(data.get("description")) or f"Tahun buku {year_number}",
        is_active=parse_bool(data.get("is_active", True), "is_active"),
    )
    db.session.add(year)
    commit_or_raise("Year")
    logger.info("Year created year=%s", year_number)
    return year


def update_year(year_number, data: dict) -> Year:
    """Update name, description and the active flag; the number itself is fixed."""
    year = get_year(year_number)
    if "is_active" in data:
        year.is_active = parse_bool(data["is_active"], "is_active")
    if "name" in data:
        year.name = optional_text(data["name"]) or year.name
    if "description" in data:
        year.description = optional_text(data["description"])
    commit_or_raise("Year")
    logger.info("Year updated year=%s", year_number)
    return year


def year_dependents(year_number) -> dict:
    return {
        "aspects": Aspect.query.filter_by(year=year_number).count(),
        "checklist_items": ChecklistItem.query.filter_by(year=year_number).count(),
        "org_units": OrgUnit.query.filter_by(year=year_number).count(),
    }


def delete_year(year_number) -> None:
    year = get_year(year_number)
    dependents = year_dependents(year_number)
    if any(dependents.values()):
        raise ConflictError(
            "Year",
            dependents,
            message="Cannot delete year with existing data. Please delete related data first.",
        )
    db.session.delete(year)
    commit_or_raise("Year")
    logger.info("Year deleted year=%s", year_number)
