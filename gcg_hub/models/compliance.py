"""
Compliance Models — yearly GCG checklist structure.

Models:
  - Year:          Book year (natural key ``year_number``)
  - Aspect:        Named grouping of checklist items within a year
  - ChecklistItem: Single compliance requirement; references its aspect by name
  - OrgUnit:       (directorate, sub_directorate, division) node for a year
  - Assignment:    ChecklistItem -> OrgUnit binding with a tracked status
"""

from datetime import datetime, timezone

from gcg_hub.models import db

STATUS_PENDING = "PENDING"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETED = "COMPLETED"
STATUS_CANCELLED = "CANCELLED"
ASSIGNMENT_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED)


class Year(db.Model):
    __tablename__ = "years"

    id = db.Column(db.Integer, primary_key=True)
    year_number = db.Column(db.Integer, unique=True, nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    aspects = db.relationship("Aspect", back_populates="year_ref", lazy="dynamic")
    checklist_items = db.relationship("ChecklistItem", back_populates="year_ref", lazy="dynamic")
    org_units = db.relationship("OrgUnit", back_populates="year_ref", lazy="dynamic")

    def to_dict(self, include_children=False):
        d = {
            "id": self.id,
            "year": self.year_number,
            "name": self.name,
            "description": self.description,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_children:
            d["aspects"] = [a.to_dict() for a in self.aspects.order_by(Aspect.name)]
            d["checklist_items"] = [c.to_dict() for c in self.checklist_items.order_by(ChecklistItem.id)]
            d["org_units"] = [o.to_dict() for o in self.org_units.order_by(OrgUnit.id)]
        return d


class Aspect(db.Model):
    __tablename__ = "aspects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(300), nullable=False)
    year = db.Column(
        db.Integer,
        db.ForeignKey("years.year_number"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("name", "year", name="uq_aspect_name_year"),
    )

    year_ref = db.relationship("Year", back_populates="aspects")

    def checklist_query(self):
        """Checklist items are linked by (aspect name, year) value, not FK."""
        return ChecklistItem.query.filter_by(aspect=self.name, year=self.year)

    def to_dict(self, include_counts=False):
        d = {
            "id": self.id,
            "name": self.name,
            "year": self.year,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_counts:
            d["checklist_count"] = self.checklist_query().count()
        return d


class ChecklistItem(db.Model):
    __tablename__ = "checklist_items"

    id = db.Column(db.Integer, primary_key=True)
    aspect = db.Column(db.String(300), nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    year = db.Column(
        db.Integer,
        db.ForeignKey("years.year_number"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    year_ref = db.relationship("Year", back_populates="checklist_items")
    assignments = db.relationship("Assignment", back_populates="checklist_item", lazy="dynamic")
    file_records = db.relationship("FileRecord", back_populates="checklist_item", lazy="dynamic")

    def to_brief(self):
        return {
            "id": self.id,
            "description": self.description,
            "aspect": self.aspect,
            "year": self.year,
        }

    def to_dict(self, include_related=False):
        d = self.to_brief()
        d["created_at"] = self.created_at.isoformat() if self.created_at else None
        d["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        if include_related:
            d["assignments"] = [a.to_dict() for a in self.assignments]
            d["files"] = [f.to_dict() for f in self.file_records]
        return d


class OrgUnit(db.Model):
    """Organizational structure node ("struktur perusahaan") for one year."""

    __tablename__ = "org_units"

    id = db.Column(db.Integer, primary_key=True)
    year = db.Column(
        db.Integer,
        db.ForeignKey("years.year_number"),
        nullable=False,
        index=True,
    )
    directorate = db.Column(db.String(200), nullable=False)
    sub_directorate = db.Column(db.String(200), nullable=False)
    division = db.Column(db.String(200), comment="NULL = all divisions")
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint(
            "year", "directorate", "sub_directorate", "division",
            name="uq_org_unit_year_path",
        ),
    )

    year_ref = db.relationship("Year", back_populates="org_units")
    assignments = db.relationship("Assignment", back_populates="org_unit", lazy="dynamic")

    def to_brief(self):
        return {
            "id": self.id,
            "year": self.year,
            "directorate": self.directorate,
            "sub_directorate": self.sub_directorate,
            "division": self.division,
        }

    def to_dict(self, include_counts=False):
        d = self.to_brief()
        d["created_at"] = self.created_at.isoformat() if self.created_at else None
        if include_counts:
            d["assignment_count"] = self.assignments.count()
        return d


class Assignment(db.Model):
    __tablename__ = "assignments"

    id = db.Column(db.Integer, primary_key=True)
    checklist_item_id = db.Column(
        db.Integer,
        db.ForeignKey("checklist_items.id"),
        nullable=False,
        index=True,
    )
    org_unit_id = db.Column(
        db.Integer,
        db.ForeignKey("org_units.id"),
        nullable=False,
        index=True,
    )
    status = db.Column(
        db.String(20),
        nullable=False,
        default=STATUS_PENDING,
        comment="PENDING | IN_PROGRESS | COMPLETED | CANCELLED",
    )
    due_date = db.Column(db.Date)
    notes = db.Column(db.Text)
    assigned_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    assigned_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("checklist_item_id", "org_unit_id", name="uq_assignment_item_unit"),
    )

    checklist_item = db.relationship("ChecklistItem", back_populates="assignments")
    org_unit = db.relationship("OrgUnit", back_populates="assignments")
    assigner = db.relationship("User", back_populates="assignments_made", foreign_keys=[assigned_by])

    def to_dict(self):
        return {
            "id": self.id,
            "checklist_item_id": self.checklist_item_id,
            "org_unit_id": self.org_unit_id,
            "status": self.status,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "notes": self.notes,
            "assigned_by": self.assigned_by,
            "assigned_at": self.assigned_at.isoformat() if self.assigned_at else None,
            "checklist_item": self.checklist_item.to_brief() if self.checklist_item else None,
            "org_unit": self.org_unit.to_brief() if self.org_unit else None,
            "assigner": self.assigner.to_brief() if self.assigner else None,
        }
