"""
Local disk storage for uploaded documents.

Stored names are random (uuid4 hex + the sanitised original extension) so two
uploads of ``laporan.pdf`` never collide and user input never becomes a path.
"""

import logging
import os
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from gcg_hub.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalFileStorage:
    """Write, locate and remove upload content under ``root``."""

    def __init__(self, root: str, max_size: int):
        self.root = os.path.abspath(root)
        self.max_size = max_size

    def _ensure_root(self):
        os.makedirs(self.root, exist_ok=True)

    def stored_name(self, original_name: str) -> str:
        ext = os.path.splitext(secure_filename(original_name or ""))[1].lower()
        return f"file-{uuid.uuid4().hex}{ext}"

    def save(self, stream, original_name: str) -> tuple[str, str, int]:
        """Copy ``stream`` to disk, enforcing ``max_size``.

        Returns ``(stored_name, path, size)``. On any failure the partial
        file is removed before the error propagates.
        """
        self._ensure_root()
        name = self.stored_name(original_name)
        path = os.path.join(self.root, name)
        size = 0
        try:
            with open(path, "wb") as fh:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_size:
                        raise ValidationError(
                            f"File too large. Maximum size is {self.max_size} bytes",
                            details={"file": "too large"},
                        )
                    fh.write(chunk)
        except Exception:
            self.delete(path)
            raise
        logger.debug("Stored upload name=%s size=%s", name, size)
        return name, path, size

    def delete(self, path: str) -> bool:
        """Remove stored content; returns False when nothing was there."""
        if not path or not os.path.exists(path):
            return False
        os.remove(path)
        return True

    def exists(self, path: str) -> bool:
        return bool(path) and os.path.isfile(path)

    def list_names(self) -> list[str]:
        if not os.path.isdir(self.root):
            return []
        return sorted(os.listdir(self.root))


def init_storage(app) -> LocalFileStorage:
    storage = LocalFileStorage(app.config["UPLOAD_FOLDER"], app.config["MAX_UPLOAD_SIZE"])
    app.extensions["file_storage"] = storage
    return storage


def get_storage() -> LocalFileStorage:
    return current_app.extensions["file_storage"]
