"""
Statistics Service — dashboard aggregates over the compliance store.

Every function is read-only and takes an optional book ``year``. Each grouped
figure is its own query, so a summary taken during concurrent writes may mix
slightly different moments.
"""

import logging
from collections import Counter

from sqlalchemy import func

from gcg_hub.models import db
from gcg_hub.models.auth import User
from gcg_hub.models.compliance import STATUS_COMPLETED, Aspect, Assignment, ChecklistItem, OrgUnit
from gcg_hub.models.document import FileRecord

logger = logging.getLogger(__name__)


def completion_rate(completed: int, total: int) -> int:
    """Percentage of completed assignments, 0 when there are none."""
    if not total:
        return 0
    return round(100 * completed / total)


def _month_counts(timestamps) -> list[dict]:
    counts = Counter(ts.strftime("%Y-%m") for ts in timestamps if ts is not None)
    return [{"month": month, "count": counts[month]} for month in sorted(counts)]


def _assignment_query(year):
    query = db.session.query(Assignment)
    if year is not None:
        query = query.join(ChecklistItem, Assignment.checklist_item_id == ChecklistItem.id)
        query = query.filter(ChecklistItem.year == year)
    return query


def assignment_summary(year=None) -> dict:
    total = _assignment_query(year).count()
    by_status = (
        _assignment_query(year)
        .with_entities(Assignment.status, func.count(Assignment.id))
        .group_by(Assignment.status)
        .all()
    )
    assigned_at = _assignment_query(year).with_entities(Assignment.assigned_at).all()
    completed = next((count for status, count in by_status if status == STATUS_COMPLETED), 0)
    return {
        "year": year,
        "total": total,
        "by_status": [{"status": s, "count": c} for s, c in sorted(by_status)],
        "by_month": _month_counts(row[0] for row in assigned_at),
        "completion_rate": completion_rate(completed, total),
    }


def file_summary(year=None) -> dict:
    def scoped(query):
        return query.filter(FileRecord.year == year) if year is not None else query

    total = scoped(db.session.query(FileRecord)).count()
    total_size = scoped(db.session.query(func.coalesce(func.sum(FileRecord.file_size), 0))).scalar() or 0
    by_type = (
        scoped(db.session.query(FileRecord.mime_type, func.count(FileRecord.id)))
        .group_by(FileRecord.mime_type)
        .all()
    )
    uploaded_at = scoped(db.session.query(FileRecord.uploaded_at)).all()
    return {
        "year": year,
        "total": total,
        "total_size": int(total_size),
        "average_size": round(total_size / total) if total else 0,
        "by_type": [{"type": t, "count": c} for t, c in sorted(by_type)],
        "by_month": _month_counts(row[0] for row in uploaded_at),
    }


def _breakdown(column, year):
    query = db.session.query(column, func.count(OrgUnit.id)).filter(column.isnot(None))
    if year is not None:
        query = query.filter(OrgUnit.year == year)
    rows = query.group_by(column).order_by(column).all()
    return [{"name": name, "count": count} for name, count in rows]


def org_unit_summary(year=None) -> dict:
    query = OrgUnit.query
    if year is not None:
        query = query.filter(OrgUnit.year == year)
    directorates = _breakdown(OrgUnit.directorate, year)
    sub_directorates = _breakdown(OrgUnit.sub_directorate, year)
    divisions = _breakdown(OrgUnit.division, year)
    return {
        "year": year,
        "total": query.count(),
        "directorate": len(directorates),
        "sub_directorate": len(sub_directorates),
        "division": len(divisions),
        "breakdown": {
            "directorate": directorates,
            "sub_directorate": sub_directorates,
            "division": divisions,
        },
    }


def year_summary(year: int) -> dict:
    """Per-year counts with a binary (100 / 0) progress flag per category."""
    aspects = Aspect.query.filter_by(year=year).count()
    checklist = ChecklistItem.query.filter_by(year=year).count()
    org_units = OrgUnit.query.filter_by(year=year).count()
    users = User.query.count()
    return {
        "year": year,
        "aspects_count": aspects,
        "checklist_count": checklist,
        "org_units_count": org_units,
        "users_count": users,
        "progress": {
            "aspects": 100 if aspects else 0,
            "checklist": 100 if checklist else 0,
            "org_units": 100 if org_units else 0,
        },
    }
