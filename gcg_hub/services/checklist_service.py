"""Checklist service — compliance requirements per year and aspect.

The ``aspect`` column holds the aspect *name*; an item is only valid when an
Aspect with that name exists in the same year.
"""
import logging
from dataclasses import dataclass

from gcg_hub.core.exceptions import ConflictError, NotFoundError, ReferentialError, ValidationError
from gcg_hub.models import db
from gcg_hub.models.compliance import STATUS_COMPLETED, Aspect, ChecklistItem, Year
from gcg_hub.services import access_service
from gcg_hub.utils.helpers import (
    commit_or_raise,
    filter_int,
    filter_value,
    ilike_pattern,
    parse_year,
    require_text,
)

logger = logging.getLogger(__name__)


@dataclass
class ChecklistFilter:
    year: int | None = None
    aspect: str | None = None
    search: str | None = None

    @classmethod
    def from_args(cls, args):
        return cls(
            year=filter_int(args.get("year"), "year"),
            aspect=filter_value(args.get("aspect")),
            search=filter_value(args.get("search")),
        )

    def apply(self, query):
        if self.year is not None:
            query = query.filter(ChecklistItem.year == self.year)
        if self.aspect:
            query = query.filter(ChecklistItem.aspect == self.aspect)
        if self.search:
            query = query.filter(
                ChecklistItem.description.ilike(ilike_pattern(self.search), escape="\\")
            )
        return query


def list_checklist(filters: ChecklistFilter | None = None):
    query = (filters or ChecklistFilter()).apply(ChecklistItem.query)
    return query.order_by(
        ChecklistItem.year.desc(),
        ChecklistItem.aspect.asc(),
        ChecklistItem.id.asc(),
    ).all()


def get_checklist_item(item_id) -> ChecklistItem:
    item = db.session.get(ChecklistItem, item_id)
    if item is None:
        raise NotFoundError("ChecklistItem", item_id)
    return item


def get_checklist_for(identity, item_id) -> ChecklistItem:
    """Fetch an item, enforcing the caller's org-unit scope."""
    item = get_checklist_item(item_id)
    access_service.check_checklist_access(identity, item)
    return item


def _validated(data: dict):
    aspect, description = require_text(data, "aspect", "description")
    year = parse_year(data.get("year"))
    if not Year.query.filter_by(year_number=year).first():
        raise ReferentialError("Year", year, message="Year does not exist")
    if not Aspect.query.filter_by(name=aspect, year=year).first():
        raise ReferentialError(
            "Aspect", aspect,
            message="Aspect does not exist for the specified year",
        )
    return aspect, description, year


def create_checklist_item(data: dict) -> ChecklistItem:
    aspect, description, year = _validated(data)
    item = ChecklistItem(aspect=aspect, description=description, year=year)
    db.session.add(item)
    commit_or_raise("ChecklistItem")
    logger.info("Checklist item created id=%s year=%s", item.id, year)
    return item


def update_checklist_item(item_id, data: dict) -> ChecklistItem:
    item = get_checklist_item(item_id)
    aspect, description, year = _validated(data)
    if year != item.year and (item.file_records.count() or item.assignments.count()):
        raise ValidationError(
            "Cannot move a checklist item with files or assignments to another year",
            details={"year": "has dependents"},
        )
    item.aspect, item.description, item.year = aspect, description, year
    commit_or_raise("ChecklistItem")
    logger.info("Checklist item updated id=%s", item.id)
    return item


def delete_checklist_item(item_id) -> None:
    item = get_checklist_item(item_id)
    dependents = {
        "file_records": item.file_records.count(),
        "assignments": item.assignments.count(),
    }
    if any(dependents.values()):
        raise ConflictError(
            "ChecklistItem",
            dependents,
            message=(
                "Cannot delete checklist item with existing files or assignments. "
                "Please delete related data first."
            ),
        )
    db.session.delete(item)
    commit_or_raise("ChecklistItem")
    logger.info("Checklist item deleted id=%s", item_id)


def checklist_status(item_id) -> dict:
    """Upload / assignment / completion flags for one item."""
    item = get_checklist_item(item_id)
    files_count = item.file_records.count()
    assignments_count = item.assignments.count()
    completed = item.assignments.filter_by(status=STATUS_COMPLETED).count() > 0
    return {
        "uploaded": files_count > 0,
        "assigned": assignments_count > 0,
        "completed": completed,
        "files_count": files_count,
        "assignments_count": assignments_count,
    }
