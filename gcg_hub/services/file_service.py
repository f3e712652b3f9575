"""File service — supporting documents attached to checklist items.

Upload order: MIME allow-list, form fields, checklist lookup and year match
are all checked before any byte is written. Once content is on disk, any
later failure removes it again so no orphan survives a failed request.
"""
import logging
from dataclasses import dataclass

from sqlalchemy import or_

from gcg_hub.core.exceptions import NotFoundError, ReferentialError, ValidationError
from gcg_hub.models import db
from gcg_hub.models.compliance import ChecklistItem
from gcg_hub.models.document import ALLOWED_MIME_TYPES, FileRecord
from gcg_hub.services import access_service
from gcg_hub.services.file_storage import get_storage
from gcg_hub.utils.helpers import (
    commit_or_raise,
    filter_int,
    filter_value,
    ilike_pattern,
    parse_int,
    parse_year,
)

logger = logging.getLogger(__name__)


@dataclass
class FileFilter:
    year: int | None = None
    checklist_item_id: int | None = None
    uploaded_by: int | None = None
    search: str | None = None

    @classmethod
    def from_args(cls, args):
        return cls(
            year=filter_int(args.get("year"), "year"),
            checklist_item_id=filter_int(args.get("checklist_item_id"), "checklist_item_id"),
            uploaded_by=filter_int(args.get("uploaded_by"), "uploaded_by"),
            search=filter_value(args.get("search")),
        )

    def apply(self, query):
        if self.year is not None:
            query = query.filter(FileRecord.year == self.year)
        if self.checklist_item_id is not None:
            query = query.filter(FileRecord.checklist_item_id == self.checklist_item_id)
        if self.uploaded_by is not None:
            query = query.filter(FileRecord.uploaded_by == self.uploaded_by)
        if self.search:
            pattern = ilike_pattern(self.search)
            query = query.filter(or_(
                FileRecord.file_name.ilike(pattern, escape="\\"),
                FileRecord.original_name.ilike(pattern, escape="\\"),
            ))
        return query


def list_files(filters: FileFilter | None = None):
    query = (filters or FileFilter()).apply(FileRecord.query)
    return query.order_by(FileRecord.uploaded_at.desc(), FileRecord.id.desc()).all()


def get_file(file_id) -> FileRecord:
    record = db.session.get(FileRecord, file_id)
    if record is None:
        raise NotFoundError("File", file_id)
    return record


def upload_file(identity, upload, data: dict) -> FileRecord:
    """Store ``upload`` (a werkzeug FileStorage) and create its record.

    Raises:
        ValidationError: no file, disallowed MIME type, too large, bad form
            fields, or the checklist item belongs to another year.
        ReferentialError: the checklist item does not exist.
    """
    if upload is None or not upload.filename:
        raise ValidationError("No file uploaded", details={"file": "missing"})
    mime_type = (upload.mimetype or "").lower()
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(
            "Invalid file type. Only documents and images are allowed.",
            details={"mime_type": mime_type or None},
        )

    item_id = parse_int(data.get("checklist_item_id"), "checklist_item_id")
    year = parse_year(data.get("year"))
    item = db.session.get(ChecklistItem, item_id)
    if item is None:
        raise ReferentialError("ChecklistItem", item_id, message="Checklist not found")
    if item.year != year:
        raise ValidationError(
            "Checklist year does not match",
            details={"checklist_year": item.year, "year": year},
        )

    storage = get_storage()
    stored_name, path, size = storage.save(upload.stream, upload.filename)
    try:
        record = FileRecord(
            file_name=stored_name,
            original_name=upload.filename,
            file_path=path,
            file_size=size,
            mime_type=mime_type,
            checklist_item_id=item_id,
            year=year,
            uploaded_by=identity.id,
        )
        db.session.add(record)
        commit_or_raise("FileRecord")
    except Exception:
        storage.delete(path)
        raise

    logger.info(
        "File uploaded id=%s checklist_item_id=%s size=%s by=%s",
        record.id, item_id, size, identity.id,
    )
    return record


def delete_file(identity, file_id) -> None:
    """Owner or admin removes the record, then the stored content."""
    record = get_file(file_id)
    access_service.check_file_access(identity, record.uploaded_by)
    path = record.file_path
    db.session.delete(record)
    commit_or_raise("FileRecord")
    try:
        get_storage().delete(path)
    except OSError:
        logger.warning("Could not remove stored content file_id=%s path=%s", file_id, path, exc_info=True)
    logger.info("File deleted id=%s by=%s", file_id, identity.id)


def download_path(file_id) -> tuple[FileRecord, str]:
    record = get_file(file_id)
    if not get_storage().exists(record.file_path):
        raise NotFoundError("Physical file", file_id)
    return record, record.file_path
