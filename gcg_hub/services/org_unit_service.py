"""Org unit service — the company structure ("struktur perusahaan") per year.

A unit is the path (directorate, sub_directorate, division) within a year;
``division`` may be empty, meaning the unit stands for every division of the
sub-directorate.
"""
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
from gcg_hub.models.compliance import Assignment, OrgUnit, Year
from gcg_hub.utils.helpers import (
    commit_or_raise,
    filter_int,
    filter_value,
    optional_text,
    parse_year,
    require_text,
)

logger = logging.getLogger(__name__)


@dataclass
class OrgUnitFilter:
    year: int | None = None
    directorate: str | None = None
    sub_directorate: str | None = None
    division: str | None = None

    @classmethod
    def from_args(cls, args):
        return cls(
            year=filter_int(args.get("year"), "year"),
            directorate=filter_value(args.get("directorate")),
            sub_directorate=filter_value(args.get("sub_directorate")),
            division=filter_value(args.get("division")),
        )

    def apply(self, query):
        if self.year is not None:
            query = query.filter(OrgUnit.year == self.year)
        if self.directorate:
            query = query.filter(OrgUnit.directorate == self.directorate)
        if self.sub_directorate:
            query = query.filter(OrgUnit.sub_directorate == self.sub_directorate)
        if self.division:
            query = query.filter(OrgUnit.division == self.division)
        return query


def list_org_units(filters: OrgUnitFilter | None = None):
    query = (filters or OrgUnitFilter()).apply(OrgUnit.query)
    return query.order_by(
        OrgUnit.year.desc(),
        OrgUnit.directorate.asc(),
        OrgUnit.sub_directorate.asc(),
        OrgUnit.division.asc(),
    ).all()


def get_org_unit(unit_id) -> OrgUnit:
    unit = db.session.get(OrgUnit, unit_id)
    if unit is None:
        raise NotFoundError("OrgUnit", unit_id)
    return unit


def find_by_path(year, directorate, sub_directorate, division):
    """Exact path lookup; a missing division only matches NULL."""
    query = OrgUnit.query.filter_by(
        year=year, directorate=directorate, sub_directorate=sub_directorate,
    )
    if division is None:
        query = query.filter(OrgUnit.division.is_(None))
    else:
        query = query.filter(OrgUnit.division == division)
    return query


def _validated(data: dict, exclude_id=None):
    directorate, sub_directorate = require_text(data, "directorate", "sub_directorate")
    year = parse_year(data.get("year"))
    division = optional_text(data.get("division"))
    if not Year.query.filter_by(year_number=year).first():
        raise ReferentialError("Year", year, message="Year does not exist")

    query = find_by_path(year, directorate, sub_directorate, division)
    if exclude_id is not None:
        query = query.filter(OrgUnit.id != exclude_id)
    if query.first():
        raise DuplicateError(
            "OrgUnit", "path", f"{directorate}/{sub_directorate}/{division or '*'}",
            message="Organizational structure already exists for the specified year",
        )
    return year, directorate, sub_directorate, division


def create_org_unit(data: dict) -> OrgUnit:
    year, directorate, sub_directorate, division = _validated(data)
    unit = OrgUnit(
        year=year,
        directorate=directorate,
        sub_directorate=sub_directorate,
        division=division,
    )
    db.session.add(unit)
    commit_or_raise("OrgUnit")
    logger.info("Org unit created id=%s year=%s", unit.id, year)
    return unit


def update_org_unit(unit_id, data: dict) -> OrgUnit:
    unit = get_org_unit(unit_id)
    year, directorate, sub_directorate, division = _validated(data, exclude_id=unit.id)
    if year != unit.year and unit.assignments.count():
        raise ValidationError(
            "Cannot move an organizational structure with assignments to another year",
            details={"year": "has dependents"},
        )
    unit.year = year
    unit.directorate = directorate
    unit.sub_directorate = sub_directorate
    unit.division = division
    commit_or_raise("OrgUnit")
    logger.info("Org unit updated id=%s", unit.id)
    return unit


def delete_org_unit(unit_id) -> None:
    unit = get_org_unit(unit_id)
    assignment_count = unit.assignments.count()
    if assignment_count:
        raise ConflictError(
            "OrgUnit",
            {"assignments": assignment_count},
            message=(
                f"Cannot delete organizational structure. It has {assignment_count} "
                "related assignments. Please reassign or delete assignments first."
            ),
        )
    db.session.delete(unit)
    commit_or_raise("OrgUnit")
    logger.info("Org unit deleted id=%s", unit_id)


def org_unit_assignments(unit_id) -> tuple[OrgUnit, list[Assignment]]:
    unit = get_org_unit(unit_id)
    return unit, unit.assignments.order_by(Assignment.assigned_at.desc()).all()
