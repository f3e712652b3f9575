"""
AOI (Area of Improvement) records.

Plain dataclasses serialised to JSON by ``gcg_hub.aoi.store``; they never
touch the relational database.
"""

from dataclasses import asdict, dataclass, field

PRIORITY_LOW = "LOW"
PRIORITY_MEDIUM = "MEDIUM"
PRIORITY_HIGH = "HIGH"
PRIORITY_CRITICAL = "CRITICAL"
PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH, PRIORITY_CRITICAL)

STATUS_PENDING = "PENDING"
STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETED = "COMPLETED"
STATUS_CANCELLED = "CANCELLED"
AOI_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED, STATUS_CANCELLED)
ACTION_STATUSES = (STATUS_PENDING, STATUS_IN_PROGRESS, STATUS_COMPLETED)


@dataclass
class ActionItem:
    id: str
    description: str
    status: str = STATUS_PENDING
    assigned_to: str = ""
    due_date: str | None = None
    completed_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ActionItem":
        return cls(
            id=str(data["id"]),
            description=data.get("description", ""),
            status=data.get("status", STATUS_PENDING),
            assigned_to=data.get("assigned_to", ""),
            due_date=data.get("due_date"),
            completed_at=data.get("completed_at"),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AOI:
    id: str
    title: str
    year: int
    description: str = ""
    aspect: str = ""
    priority: str = PRIORITY_MEDIUM
    status: str = STATUS_PENDING
    assigned_to: str = ""
    due_date: str | None = None
    progress: int = 0
    created_at: str | None = None
    updated_at: str | None = None
    action_items: list[ActionItem] = field(default_factory=list)
    documents: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "AOI":
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            year=int(data["year"]),
            description=data.get("description", ""),
            aspect=data.get("aspect", ""),
            priority=data.get("priority", PRIORITY_MEDIUM),
            status=data.get("status", STATUS_PENDING),
            assigned_to=data.get("assigned_to", ""),
            due_date=data.get("due_date"),
            progress=int(data.get("progress", 0)),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            action_items=[ActionItem.from_dict(a) for a in data.get("action_items", [])],
            documents=[str(d) for d in data.get("documents", [])],
        )

    def to_dict(self) -> dict:
        return asdict(self)

    def find_action(self, action_id: str) -> ActionItem | None:
        return next((a for a in self.action_items if a.id == action_id), None)
