"""Task model for the kanban board.

Defines the three status buckets, the priority levels with their single
rank table, and the :class:`Task` dataclass together with the helpers
that turn raw caller input into clean field values.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from .errors import InvalidStatusError, ValidationError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    """Board column a task lives in."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    """Priority level of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]


# Lower rank sorts first in ascending priority order (high > medium > low).
PRIORITY_RANK: dict[TaskPriority, int] = {
    TaskPriority.HIGH: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.LOW: 2,
}

BOARD_STATUSES: tuple[TaskStatus, ...] = (
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.DONE,
)

DEFAULT_TITLE_MAX_LENGTH = 100
DEFAULT_DESCRIPTION_MAX_LENGTH = 1000


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_status(raw: Any) -> TaskStatus:
    """Coerce *raw* into a :class:`TaskStatus` or raise :class:`InvalidStatusError`."""
    if isinstance(raw, TaskStatus):
        return raw
    try:
        return TaskStatus(str(raw))
    except ValueError:
        valid = [s.value for s in TaskStatus]
        raise InvalidStatusError(f"Invalid status '{raw}'. Valid statuses: {valid}") from None


def parse_priority(raw: Any) -> TaskPriority:
    if isinstance(raw, TaskPriority):
        return raw
    try:
        return TaskPriority(str(raw))
    except ValueError:
        valid = [p.value for p in TaskPriority]
        raise ValidationError(f"Invalid priority '{raw}'. Valid priorities: {valid}") from None


def clean_title(raw: Any, max_length: int = DEFAULT_TITLE_MAX_LENGTH) -> str:
    """Trim and truncate a title, rejecting empty values."""
    if raw is None:
        raise ValidationError("Title is required")
    title = str(raw).strip()[:max_length]
    if not title:
        raise ValidationError("Title is required")
    return title


def clean_description(raw: Any, max_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH) -> str:
    if raw is None:
        return ""
    return str(raw).strip()[:max_length]


def parse_due_date(raw: Any) -> Optional[str]:
    """Normalize a due date to UTC ISO text.

    Accepts ``date``, ``datetime`` or ISO strings.  Anything that cannot be
    parsed becomes ``None``; naive values are read as UTC.
    """
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        dt = raw
    elif isinstance(raw, date):
        dt = datetime(raw.year, raw.month, raw.day)
    elif isinstance(raw, str):
        text = raw.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def due_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored ``due_date`` back into an aware datetime."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

@dataclass
class Task:
    """A card on the board.

    ``order`` is only meaningful inside the task's current ``status`` bucket;
    the store keeps every bucket densely numbered ``0..n-1``.
    """

    id: int
    title: str
    order: int = 0
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[str] = None
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain JSON-friendly dict."""
        data: dict[str, Any] = {}
        for k, v in asdict(self).items():
            if isinstance(v, Enum):
                data[k] = v.value
            else:
                data[k] = v
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Deserialize from a plain dict, coercing enums gracefully."""
        d = dict(data)

        def _enum(enum_cls: type[Enum], key: str, default: Enum) -> Enum:
            raw = d.pop(key, None)
            if raw is None:
                return default
            if isinstance(raw, enum_cls):
                return raw
            try:
                return enum_cls(str(raw))
            except (ValueError, KeyError):
                return default

        status = _enum(TaskStatus, "status", TaskStatus.TODO)
        priority = _enum(TaskPriority, "priority", TaskPriority.MEDIUM)
        created_at = str(d.pop("created_at", None) or _now_iso())
        return cls(
            id=int(d.pop("id")),
            title=str(d.pop("title", "")),
            order=max(0, int(d.pop("order", 0) or 0)),
            description=str(d.pop("description", "") or ""),
            status=status,  # type: ignore[arg-type]
            priority=priority,  # type: ignore[arg-type]
            due_date=parse_due_date(d.pop("due_date", None)),
            created_at=created_at,
            updated_at=str(d.pop("updated_at", None) or created_at),
        )

    def copy(self) -> "Task":
        return replace(self)

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------

    def touch(self) -> None:
        """Bump ``updated_at`` to now."""
        self.updated_at = _now_iso()

    def place(self, status: TaskStatus, order: int) -> None:
        """Set ``status`` and ``order`` together."""
        self.status = status
        self.order = order
        self.touch()
