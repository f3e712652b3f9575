"""Aspect service — named checklist groupings within a year."""
import logging
from dataclasses import dataclass

from gcg_hub.core.exceptions import (
    ConflictError,
    DuplicateError,
    NotFoundError,
    ReferentialError,
    ValidationError,
)
from gcg_hub.models import db
from gcg_hub.models.compliance import Aspect, ChecklistItem, Year
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
class AspectFilter:
    year: int | None = None
    search: str | None = None

    @classmethod
    def from_args(cls, args):
        return cls(
            year=filter_int(args.get("year"), "year"),
            search=filter_value(args.get("search")),
        )

    def apply(self, query):
        if self.year is not None:
            query = query.filter(Aspect.year == self.year)
        if self.search:
            query = query.filter(Aspect.name.ilike(ilike_pattern(self.search), escape="\\"))
        return query


def list_aspects(filters: AspectFilter | None = None):
    query = (filters or AspectFilter()).apply(Aspect.query)
    return query.order_by(Aspect.year.desc(), Aspect.name.asc()).all()


def get_aspect(aspect_id) -> Aspect:
    aspect = db.session.get(Aspect, aspect_id)
    if aspect is None:
        raise NotFoundError("Aspect", aspect_id)
    return aspect


def _validated(data: dict, exclude_id=None):
    (name,) = require_text(data, "name")
    year = parse_year(data.get("year"))
    if not Year.query.filter_by(year_number=year).first():
        raise ReferentialError("Year", year, message="Year does not exist")

    query = Aspect.query.filter_by(name=name, year=year)
    if exclude_id is not None:
        query = query.filter(Aspect.id != exclude_id)
    if query.first():
        raise DuplicateError(
            "Aspect", "name", name,
            message="Aspect already exists for the specified year",
        )
    return name, year


def create_aspect(data: dict) -> Aspect:
    name, year = _validated(data)
    aspect = Aspect(name=name, year=year)
    db.session.add(aspect)
    commit_or_raise("Aspect")
    logger.info("Aspect created id=%s year=%s", aspect.id, year)
    return aspect


def update_aspect(aspect_id, data: dict) -> Aspect:
    """Rename or move an aspect. Items follow a rename; a move needs no items."""
    aspect = get_aspect(aspect_id)
    name, year = _validated(data, exclude_id=aspect.id)
    items = aspect.checklist_query()
    if year != aspect.year and items.count():
        raise ValidationError(
            "Cannot move an aspect with checklist items to another year",
            details={"year": "has dependents"},
        )
    if name != aspect.name:
        items.update({ChecklistItem.aspect: name}, synchronize_session="fetch")
    aspect.name = name
    aspect.year = year
    commit_or_raise("Aspect")
    logger.info("Aspect updated id=%s", aspect.id)
    return aspect


def delete_aspect(aspect_id) -> None:
    aspect = get_aspect(aspect_id)
    checklist_count = aspect.checklist_query().count()
    if checklist_count:
        raise ConflictError(
            "Aspect",
            {"checklist_items": checklist_count},
            message=(
                f"Cannot delete aspect. It has {checklist_count} related checklist items. "
                "Please delete or reassign checklist items first."
            ),
        )
    db.session.delete(aspect)
    commit_or_raise("Aspect")
    logger.info("Aspect deleted id=%s", aspect_id)


def aspect_checklist(aspect_id) -> tuple[Aspect, list[ChecklistItem]]:
    aspect = get_aspect(aspect_id)
    return aspect, aspect.checklist_query().order_by(ChecklistItem.id).all()
