"""
AOI store — improvement initiatives kept in a local JSON key-value file.

The whole AOI list lives under one key (``aoiData``). Every mutation rewrites
the file atomically, swaps in the new state only once that write succeeded,
then notifies subscribers with the event name and the full, updated list.

Usage:
    store = AOIStore(JsonFileKeyValueStore("instance/aoi_store.json"))
    unsubscribe = store.subscribe(lambda event, aois: print(event, len(aois)))
    aoi = store.create({"title": "...", "year": 2025, "priority": "HIGH"})
    store.update_progress(aoi.id, 100)   # status becomes COMPLETED
    unsubscribe()
"""

import json
import logging
import os
import tempfile
import threading
import uuid
from datetime import date, datetime, timezone

from flask import current_app

from gcg_hub.aoi.models import (
    ACTION_STATUSES,
    AOI,
    AOI_STATUSES,
    PRIORITIES,
    PRIORITY_CRITICAL,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    ActionItem,
)
from gcg_hub.core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

STORE_KEY = "aoiData"

# Fields callers may set through create / update
_AOI_FIELDS = ("title", "description", "aspect", "priority", "status",
               "assigned_to", "due_date", "progress", "documents", "year")
_ACTION_FIELDS = ("description", "status", "assigned_to", "due_date")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonFileKeyValueStore:
    """Tiny persistent key-value store backed by one JSON object on disk."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key, default=None):
        with self._lock:
            return self._read_all().get(key, default)

    def set(self, key, value) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except ValueError:
                logger.warning("Key-value file %s unreadable, rewriting it", self.path)
                data = {}
            data[key] = value
            directory = os.path.dirname(os.path.abspath(self.path))
            os.makedirs(directory, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=directory, prefix=".kv-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, ensure_ascii=False, indent=2)
                os.replace(tmp, self.path)
            except Exception:
                if os.path.exists(tmp):
                    os.remove(tmp)
                raise


class AOIStore:
    """CRUD over AOIs and their action items, with change subscriptions."""

    def __init__(self, kv: JsonFileKeyValueStore):
        self.kv = kv
        self._subscribers = []
        self._aois = self._load()

    # ── persistence / observers ────────────────────────────────────────────

    def _load(self) -> list[AOI]:
        try:
            raw = self.kv.get(STORE_KEY, [])
        except ValueError:
            logger.warning("AOI store %s is corrupt, starting empty", self.kv.path)
            return []
        if not isinstance(raw, list):
            logger.warning("AOI store key %s is not a list, starting empty", STORE_KEY)
            return []
        try:
            return [AOI.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("AOI store %s holds malformed records, starting empty", self.kv.path)
            return []

    def _copy(self) -> list[AOI]:
        return [AOI.from_dict(a.to_dict()) for a in self._aois]

    def _commit(self, event: str, aois: list[AOI]) -> None:
        """Persist ``aois`` and only then make them the current state."""
        self.kv.set(STORE_KEY, [a.to_dict() for a in aois])
        self._aois = aois
        snapshot = self.all()
        for callback in list(self._subscribers):
            callback(event, snapshot)

    def subscribe(self, callback):
        """Register ``callback(event, aois)``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ── queries ────────────────────────────────────────────────────────────

    def all(self) -> list[AOI]:
        return self._copy()

    def query(self, year=None, aspect=None, status=None, priority=None) -> list[AOI]:
        result = []
        for aoi in self.all():
            if year is not None and aoi.year != year:
                continue
            if aspect and aoi.aspect != aspect:
                continue
            if status and aoi.status != status:
                continue
            if priority and aoi.priority != priority:
                continue
            result.append(aoi)
        return result

    @staticmethod
    def _find(aois: list[AOI], aoi_id: str) -> AOI:
        for aoi in aois:
            if aoi.id == aoi_id:
                return aoi
        raise NotFoundError("AOI", aoi_id)

    def get(self, aoi_id: str) -> AOI:
        return AOI.from_dict(self._find(self._aois, aoi_id).to_dict())

    def stats(self, year: int) -> dict:
        aois = self.query(year=year)

        def count(attr, value):
            return sum(1 for a in aois if getattr(a, attr) == value)

        return {
            "year": year,
            "total": len(aois),
            "completed": count("status", STATUS_COMPLETED),
            "in_progress": count("status", STATUS_IN_PROGRESS),
            "pending": count("status", STATUS_PENDING),
            "critical": count("priority", PRIORITY_CRITICAL),
            "high": count("priority", PRIORITY_HIGH),
            "medium": count("priority", PRIORITY_MEDIUM),
            "low": count("priority", PRIORITY_LOW),
        }

    # ── AOI mutations ──────────────────────────────────────────────────────

    def create(self, data: dict) -> AOI:
        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("title is required", details={"title": "missing"})
        if data.get("year") in (None, ""):
            raise ValidationError("year is required", details={"year": "missing"})

        now = _now()
        aoi = AOI(id=uuid.uuid4().hex, title=title, year=0, created_at=now, updated_at=now)
        self._apply(aoi, {k: v for k, v in data.items() if k != "title"})
        aoi.action_items = [
            self._new_action(item) for item in data.get("action_items", [])
        ]
        aois = self._copy()
        aois.append(aoi)
        self._commit("aoi_created", aois)
        logger.info("AOI created id=%s year=%s", aoi.id, aoi.year)
        return self.get(aoi.id)

    def update(self, aoi_id: str, updates: dict) -> AOI:
        aois = self._copy()
        aoi = self._find(aois, aoi_id)
        self._apply(aoi, updates)
        aoi.updated_at = _now()
        self._commit("aoi_updated", aois)
        return self.get(aoi_id)

    def delete(self, aoi_id: str) -> None:
        aois = self._copy()
        aois.remove(self._find(aois, aoi_id))
        self._commit("aoi_deleted", aois)
        logger.info("AOI deleted id=%s", aoi_id)

    def update_progress(self, aoi_id: str, progress) -> AOI:
        """Clamp to 0..100; reaching 100 marks the AOI COMPLETED."""
        aois = self._copy()
        aoi = self._find(aois, aoi_id)
        self._apply(aoi, {"progress": progress})
        aoi.updated_at = _now()
        self._commit("aoi_progress", aois)
        return self.get(aoi_id)

    # ── action items ───────────────────────────────────────────────────────

    def add_action_item(self, aoi_id: str, data: dict) -> ActionItem:
        aois = self._copy()
        aoi = self._find(aois, aoi_id)
        item = self._new_action(data)
        aoi.action_items.append(item)
        aoi.updated_at = _now()
        self._commit("action_item_added", aois)
        return ActionItem.from_dict(item.to_dict())

    def update_action_item(self, aoi_id: str, action_id: str, updates: dict) -> ActionItem:
        aois = self._copy()
        aoi = self._find(aois, aoi_id)
        item = aoi.find_action(action_id)
        if item is None:
            raise NotFoundError("ActionItem", action_id)
        self._apply_action(item, updates)
        aoi.updated_at = _now()
        self._commit("action_item_updated", aois)
        return ActionItem.from_dict(item.to_dict())

    def delete_action_item(self, aoi_id: str, action_id: str) -> None:
        aois = self._copy()
        aoi = self._find(aois, aoi_id)
        item = aoi.find_action(action_id)
        if item is None:
            raise NotFoundError("ActionItem", action_id)
        aoi.action_items.remove(item)
        aoi.updated_at = _now()
        self._commit("action_item_deleted", aois)

    # ── defaults ───────────────────────────────────────────────────────────

    def init_defaults(self, year: int | None = None) -> list[AOI]:
        """Replace the store content with the two sample AOIs."""
        year = year or date.today().year
        now = _now()
        self._commit("aoi_initialized", [AOI.from_dict(item) for item in default_aois(year, now)])
        logger.info("AOI store initialised with defaults year=%s", year)
        return self.all()

    # ── helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def _as_int(value, name) -> int:
        if isinstance(value, bool):
            raise ValidationError(f"Invalid {name}", details={name: "not a number"})
        try:
            return int(float(value))
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid {name}", details={name: "not a number"}) from None

    def _apply(self, aoi: AOI, updates: dict) -> None:
        for key in _AOI_FIELDS:
            if key not in updates:
                continue
            value = updates[key]
            if key == "title":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("title is required", details={"title": "missing"})
            elif key == "priority":
                value = str(value).upper()
                if value not in PRIORITIES:
                    raise ValidationError(
                        f"Invalid priority. Must be one of: {', '.join(PRIORITIES)}",
                        details={"priority": "invalid"},
                    )
            elif key == "status":
                value = str(value).upper()
                if value not in AOI_STATUSES:
                    raise ValidationError(
                        f"Invalid status. Must be one of: {', '.join(AOI_STATUSES)}",
                        details={"status": "invalid"},
                    )
            elif key == "progress":
                value = max(0, min(100, self._as_int(value, "progress")))
            elif key == "year":
                value = self._as_int(value, "year")
            elif key == "documents":
                value = [str(d) for d in value or []]
            setattr(aoi, key, value)
        if aoi.progress >= 100:
            aoi.status = STATUS_COMPLETED

    def _new_action(self, data: dict) -> ActionItem:
        description = (data.get("description") or "").strip()
        if not description:
            raise ValidationError("description is required", details={"description": "missing"})
        item = ActionItem(id=uuid.uuid4().hex, description=description)
        self._apply_action(item, {k: v for k, v in data.items() if k != "description"})
        return item

    @staticmethod
    def _apply_action(item: ActionItem, updates: dict) -> None:
        for key in _ACTION_FIELDS:
            if key not in updates:
                continue
            value = updates[key]
            if key == "status":
                value = str(value).upper()
                if value not in ACTION_STATUSES:
                    raise ValidationError(
                        f"Invalid action status. Must be one of: {', '.join(ACTION_STATUSES)}",
                        details={"status": "invalid"},
                    )
            setattr(item, key, value)
        if item.status == STATUS_COMPLETED:
            item.completed_at = item.completed_at or _now()
        elif "status" in updates:
            item.completed_at = None


def default_aois(year: int, now: str) -> list[dict]:
    return [
        {
            "id": "1",
            "title": "Peningkatan Transparansi Laporan Keuangan",
            "description": "Meningkatkan kualitas dan detail laporan keuangan untuk memenuhi standar GCG",
            "aspect": "ASPEK I. Komitmen",
            "priority": PRIORITY_HIGH,
            "status": STATUS_IN_PROGRESS,
            "assigned_to": "Tim Keuangan",
            "due_date": f"{year}-12-31",
            "created_at": now,
            "updated_at": now,
            "progress": 65,
            "action_items": [
                {
                    "id": "1",
                    "description": "Review standar pelaporan keuangan",
                    "status": STATUS_COMPLETED,
                    "assigned_to": "Manager Keuangan",
                    "due_date": f"{year}-06-30",
                    "completed_at": now,
                },
                {
                    "id": "2",
                    "description": "Implementasi sistem pelaporan digital",
                    "status": STATUS_IN_PROGRESS,
                    "assigned_to": "Tim IT",
                    "due_date": f"{year}-09-30",
                },
            ],
            "documents": [],
            "year": year,
        },
        {
            "id": "2",
            "title": "Penguatan Risk Management Framework",
            "description": "Mengembangkan framework manajemen risiko yang komprehensif",
            "aspect": "ASPEK III. Dewan Komisaris",
            "priority": PRIORITY_MEDIUM,
            "status": STATUS_PENDING,
            "assigned_to": "Tim Risk Management",
            "due_date": f"{year}-12-31",
            "created_at": now,
            "updated_at": now,
            "progress": 0,
            "action_items": [
                {
                    "id": "1",
                    "description": "Identifikasi risiko utama",
                    "status": STATUS_PENDING,
                    "assigned_to": "Risk Officer",
                    "due_date": f"{year}-08-31",
                },
            ],
            "documents": [],
            "year": year,
        },
    ]


def get_aoi_store() -> AOIStore:
    """The app's AOI store, created on first use from AOI_STORE_PATH."""
    store = current_app.extensions.get("aoi_store")
    if store is None:
        store = AOIStore(JsonFileKeyValueStore(current_app.config["AOI_STORE_PATH"]))
        current_app.extensions["aoi_store"] = store
    return store
