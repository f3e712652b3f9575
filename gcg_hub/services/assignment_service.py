"""Assignment service — checklist items bound to org units.

Rules:
  - An item and a unit can only be linked when both belong to the same year.
  - One assignment per (checklist item, org unit) pair.
  - Admins edit everything; a non-admin may only move the status of an
    assignment on their own org unit.
"""
import logging
from dataclasses import dataclass

from gcg_hub.core.exceptions import DuplicateError, NotFoundError, ReferentialError, ValidationError
from gcg_hub.models import db
from gcg_hub.models.compliance import ASSIGNMENT_STATUSES, STATUS_PENDING, Assignment, ChecklistItem, OrgUnit
from gcg_hub.services import access_service
from gcg_hub.utils.helpers import (
    commit_or_raise,
    filter_int,
    filter_value,
    optional_text,
    parse_date_input,
    parse_int,
)

logger = logging.getLogger(__name__)


@dataclass
class AssignmentFilter:
    year: int | None = None
    checklist_item_id: int | None = None
    org_unit_id: int | None = None
    status: str | None = None
    assigned_by: int | None = None

    @classmethod
    def from_args(cls, args):
        return cls(
            year=filter_int(args.get("year"), "year"),
            checklist_item_id=filter_int(args.get("checklist_item_id"), "checklist_item_id"),
            org_unit_id=filter_int(args.get("org_unit_id"), "org_unit_id"),
            status=filter_value(args.get("status")),
            assigned_by=filter_int(args.get("assigned_by"), "assigned_by"),
        )

    def apply(self, query):
        if self.year is not None:
            query = query.join(ChecklistItem, Assignment.checklist_item_id == ChecklistItem.id)
            query = query.filter(ChecklistItem.year == self.year)
        if self.checklist_item_id is not None:
            query = query.filter(Assignment.checklist_item_id == self.checklist_item_id)
        if self.org_unit_id is not None:
            query = query.filter(Assignment.org_unit_id == self.org_unit_id)
        if self.status:
            query = query.filter(Assignment.status == self.status)
        if self.assigned_by is not None:
            query = query.filter(Assignment.assigned_by == self.assigned_by)
        return query


def _validate_status(status):
    status = (status or "").strip().upper()
    if not status:
        raise ValidationError("Status is required", details={"status": "missing"})
    if status not in ASSIGNMENT_STATUSES:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(ASSIGNMENT_STATUSES)}",
            details={"status": "invalid"},
        )
    return status


def list_assignments(filters: AssignmentFilter | None = None):
    query = (filters or AssignmentFilter()).apply(Assignment.query)
    return query.order_by(Assignment.assigned_at.desc(), Assignment.id.desc()).all()


def get_assignment(assignment_id) -> Assignment:
    assignment = db.session.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Assignment", assignment_id)
    return assignment


def create_assignment(data: dict, assigned_by: int) -> Assignment:
    """Link a checklist item to an org unit of the same year.

    Raises:
        ValidationError: ids missing/malformed, bad status or due date, year mismatch.
        ReferentialError: checklist item or org unit does not exist.
        DuplicateError: the pair is already assigned.
    """
    item_id = parse_int(data.get("checklist_item_id"), "checklist_item_id")
    unit_id = parse_int(data.get("org_unit_id"), "org_unit_id")
    due_date = parse_date_input(data.get("due_date"))
    status = _validate_status(data["status"]) if data.get("status") else STATUS_PENDING

    item = db.session.get(ChecklistItem, item_id)
    if item is None:
        raise ReferentialError("ChecklistItem", item_id, message="Checklist not found")
    unit = db.session.get(OrgUnit, unit_id)
    if unit is None:
        raise ReferentialError("OrgUnit", unit_id, message="Organizational structure not found")
    if item.year != unit.year:
        raise ValidationError(
            "Checklist and organizational structure years do not match",
            details={"checklist_year": item.year, "org_unit_year": unit.year},
        )
    if Assignment.query.filter_by(checklist_item_id=item_id, org_unit_id=unit_id).first():
        raise DuplicateError(
            "Assignment", "checklist_item_id,org_unit_id", (item_id, unit_id),
            message="Assignment already exists for this checklist and organizational structure",
        )

    assignment = Assignment(
        checklist_item_id=item_id,
        org_unit_id=unit_id,
        status=status,
        due_date=due_date,
        notes=optional_text(data.get("notes")),
        assigned_by=assigned_by,
    )
    db.session.add(assignment)
    commit_or_raise("Assignment")
    logger.info(
        "Assignment created id=%s checklist_item_id=%s org_unit_id=%s by=%s",
        assignment.id, item_id, unit_id, assigned_by,
    )
    return assignment


def update_assignment(assignment_id, data: dict) -> Assignment:
    """Admin edit of status, due date and notes."""
    assignment = get_assignment(assignment_id)
    if data.get("status"):
        assignment.status = _validate_status(data["status"])
    if "due_date" in data:
        assignment.due_date = parse_date_input(data["due_date"])
    if "notes" in data:
        assignment.notes = optional_text(data["notes"])
    commit_or_raise("Assignment")
    logger.info("Assignment updated id=%s", assignment.id)
    return assignment


def update_status(identity, assignment_id, status) -> Assignment:
    """Status change allowed to admins and to members of the assigned unit."""
    status = _validate_status(status)
    assignment = get_assignment(assignment_id)
    access_service.check_assignment_status_access(identity, assignment)
    old = assignment.status
    assignment.status = status
    commit_or_raise("Assignment")
    logger.info(
        "Assignment status changed id=%s %s -> %s by=%s",
        assignment.id, old, status, identity.id,
    )
    return assignment


def delete_assignment(assignment_id) -> None:
    assignment = get_assignment(assignment_id)
    db.session.delete(assignment)
    commit_or_raise("Assignment")
    logger.info("Assignment deleted id=%s", assignment_id)
