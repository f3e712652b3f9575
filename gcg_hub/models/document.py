"""
Document Models — uploaded supporting files.

A FileRecord is the database side of an upload; the bytes live in the
upload folder managed by ``gcg_hub.services.file_storage``.
"""

from datetime import datetime, timezone

from gcg_hub.models import db

ALLOWED_MIME_TYPES = frozenset({
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "image/jpeg",
    "image/png",
    "image/gif",
})


class FileRecord(db.Model):
    __tablename__ = "file_records"

    id = db.Column(db.Integer, primary_key=True)
    file_name = db.Column(db.String(300), nullable=False, comment="Stored (generated) name")
    original_name = db.Column(db.String(300), nullable=False)
    file_path = db.Column(db.String(1000), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    mime_type = db.Column(db.String(150), nullable=False)
    checklist_item_id = db.Column(
        db.Integer,
        db.ForeignKey("checklist_items.id"),
        nullable=False,
        index=True,
    )
    year = db.Column(
        db.Integer,
        db.ForeignKey("years.year_number"),
        nullable=False,
        index=True,
    )
    uploaded_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    uploaded_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    checklist_item = db.relationship("ChecklistItem", back_populates="file_records")
    uploader = db.relationship("User", back_populates="file_records", foreign_keys=[uploaded_by])

    def to_dict(self):
        return {
            "id": self.id,
            "file_name": self.file_name,
            "original_name": self.original_name,
            "file_size": self.file_size,
            "mime_type": self.mime_type,
            "checklist_item_id": self.checklist_item_id,
            "year": self.year,
            "uploaded_by": self.uploaded_by,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "checklist_item": self.checklist_item.to_brief() if self.checklist_item else None,
            "uploader": self.uploader.to_brief() if self.uploader else None,
        }
