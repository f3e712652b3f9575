"""
Auth Models — application users.

Users carry a role (ADMIN / USER) and the organizational-unit attributes
(directorate, sub-directorate, division) used for assignment scoping.
"""

from datetime import datetime, timezone

from gcg_hub.models import db

ROLE_ADMIN = "ADMIN"
ROLE_USER = "USER"
ROLES = (ROLE_ADMIN, ROLE_USER)


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)
    directorate = db.Column(db.String(200))
    sub_directorate = db.Column(db.String(200))
    division = db.Column(db.String(200))
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    file_records = db.relationship(
        "FileRecord", back_populates="uploader", lazy="dynamic",
        foreign_keys="FileRecord.uploaded_by",
    )
    assignments_made = db.relationship(
        "Assignment", back_populates="assigner", lazy="dynamic",
        foreign_keys="Assignment.assigned_by",
    )

    @property
    def is_admin(self):
        return self.role == ROLE_ADMIN

    def to_dict(self, include_counts=False):
        d = {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "directorate": self.directorate,
            "sub_directorate": self.sub_directorate,
            "division": self.division,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_counts:
            d["file_count"] = self.file_records.count()
            d["assignment_count"] = self.assignments_made.count()
        return d

    def to_brief(self):
        """Minimal projection embedded in assignment / file payloads."""
        return {"id": self.id, "name": self.name, "username": self.username}
