"""
Access Service — role and organizational-unit scoping.

Non-admin callers are scoped by their (directorate, sub_directorate, division)
attributes. An org unit with no division covers every division of its
sub-directorate.
"""

import logging

from gcg_hub.core.exceptions import AccessDeniedError, ForbiddenError
from gcg_hub.models.compliance import Assignment, OrgUnit

logger = logging.getLogger(__name__)


def require_admin(identity) -> None:
    if identity is None or not identity.is_admin:
        raise ForbiddenError()


def unit_covers_identity(unit: OrgUnit, identity) -> bool:
    """True when ``unit`` is the caller's unit or a division-less parent of it."""
    if unit is None:
        return False
    if unit.directorate != identity.directorate or unit.sub_directorate != identity.sub_directorate:
        return False
    return unit.division is None or unit.division == identity.division


def can_access_checklist(identity, checklist_item, assignments=None) -> bool:
    if identity.is_admin:
        return True
    if assignments is None:
        assignments = checklist_item.assignments.all()
    return any(unit_covers_identity(a.org_unit, identity) for a in assignments)


def check_checklist_access(identity, checklist_item, assignments=None) -> None:
    """Raise AccessDeniedError unless the caller may see ``checklist_item``."""
    if not can_access_checklist(identity, checklist_item, assignments):
        logger.info(
            "Checklist access denied user_id=%s checklist_item_id=%s",
            identity.id, checklist_item.id,
        )
        raise AccessDeniedError("Access denied to this checklist item")


def resolve_identity_unit(identity, year: int) -> OrgUnit | None:
    """The org unit whose path equals the caller's own attributes for ``year``."""
    query = OrgUnit.query.filter(
        OrgUnit.year == year,
        OrgUnit.directorate == identity.directorate,
        OrgUnit.sub_directorate == identity.sub_directorate,
    )
    if identity.division is None:
        query = query.filter(OrgUnit.division.is_(None))
    else:
        query = query.filter(OrgUnit.division == identity.division)
    return query.first()


def can_update_assignment_status(identity, assignment: Assignment) -> bool:
    if identity.is_admin:
        return True
    unit = resolve_identity_unit(identity, assignment.org_unit.year)
    return unit is not None and unit.id == assignment.org_unit_id


def check_assignment_status_access(identity, assignment: Assignment) -> None:
    if not can_update_assignment_status(identity, assignment):
        logger.info(
            "Assignment status change denied user_id=%s assignment_id=%s",
            identity.id, assignment.id,
        )
        raise AccessDeniedError(
            "Access denied. You can only update assignments for your organizational structure."
        )


def can_modify_file(identity, owner_id: int) -> bool:
    return identity.is_admin or identity.id == owner_id


def check_file_access(identity, owner_id: int) -> None:
    if not can_modify_file(identity, owner_id):
        raise AccessDeniedError("Access denied to this file")


def check_user_access(identity, target_user_id: int, changing_role: bool = False) -> None:
    """Self or admin may view and edit a user; only admins change roles."""
    if changing_role and not identity.is_admin:
        raise ForbiddenError("Only admin can change user roles")
    if not identity.is_admin and identity.id != target_user_id:
        raise AccessDeniedError()
