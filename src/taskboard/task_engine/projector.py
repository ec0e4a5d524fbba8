"""Read-side projection of the task set.

Filters and sorts a snapshot of tasks for presentation.  Nothing here
writes to the store: every function takes a sequence and returns a new
list.
"""

from __future__ import annotations

import locale
import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import cmp_to_key
from typing import Any, Callable, Optional

from .model import (
    BOARD_STATUSES,
    Task,
    TaskPriority,
    TaskStatus,
    due_datetime,
)

SEARCH_MAX_LENGTH = 100


class SortField(str, Enum):
    ORDER = "order"
    PRIORITY = "priority"
    DUE_DATE = "dueDate"
    TITLE = "title"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class ListQuery:
    """Filter and sort settings for :func:`project`.

    An empty ``priorities`` set means "no priority filter".
    """

    sort_by: SortField = SortField.ORDER
    sort_direction: SortDirection = SortDirection.ASC
    priorities: frozenset[TaskPriority] = field(default_factory=frozenset)
    search: str = ""

    @classmethod
    def from_params(
        cls,
        *,
        sort_by: Optional[str] = None,
        sort_direction: Optional[str] = None,
        priorities: Any = None,
        search: Optional[str] = None,
    ) -> "ListQuery":
        """Build a query from loose caller input.

        Unknown sort fields and directions fall back to the defaults, unknown
        priority names are dropped, and ``priorities`` may be a comma-separated
        string or an iterable of names.
        """
        return cls(
            sort_by=_enum_or_default(SortField, sort_by, SortField.ORDER),
            sort_direction=_enum_or_default(SortDirection, sort_direction, SortDirection.ASC),
            priorities=frozenset(_parse_priorities(priorities)),
            search=(search or "")[:SEARCH_MAX_LENGTH].strip(),
        )


def _enum_or_default(enum_cls: type[Enum], raw: Optional[str], default: Any) -> Any:
    if raw is None:
        return default
    try:
        return enum_cls(raw)
    except ValueError:
        return default


def _parse_priorities(raw: Any) -> list[TaskPriority]:
    if not raw:
        return []
    if isinstance(raw, str):
        items: Iterable[Any] = raw.split(",")
    else:
        items = raw
    out: list[TaskPriority] = []
    for item in items:
        if isinstance(item, TaskPriority):
            out.append(item)
            continue
        try:
            out.append(TaskPriority(str(item).strip()))
        except ValueError:
            continue
    return out


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def matches(task: Task, query: ListQuery) -> bool:
    if query.search:
        needle = query.search.lower()
        if needle not in task.title.lower() and needle not in (task.description or "").lower():
            return False
    if query.priorities and task.priority not in query.priorities:
        return False
    return True


# ---------------------------------------------------------------------------
# Comparators
# ---------------------------------------------------------------------------

Comparator = Callable[[Task, Task], int]


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def compare_order(a: Task, b: Task) -> int:
    return _sign(a.order - b.order)


def compare_priority(a: Task, b: Task) -> int:
    return _sign(a.priority.rank - b.priority.rank)


def compare_due_date(a: Task, b: Task) -> int:
    # A missing date on either side compares equal, so undated tasks keep
    # whatever position the stable sort leaves them in.
    da = due_datetime(a.due_date)
    db = due_datetime(b.due_date)
    if da is None or db is None:
        return 0
    return _sign((da - db).total_seconds())


def title_collation_key(title: str) -> str:
    """Accent- and case-insensitive key: NFKD with combining marks dropped, casefolded."""
    decomposed = unicodedata.normalize("NFKD", title)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def compare_title(a: Task, b: Task) -> int:
    ka = title_collation_key(a.title)
    kb = title_collation_key(b.title)
    if ka != kb:
        return (ka > kb) - (ka < kb)
    secondary = locale.strcoll(a.title.casefold(), b.title.casefold())
    if secondary:
        return _sign(secondary)
    return _sign(locale.strcoll(a.title, b.title))


COMPARATORS: dict[SortField, Comparator] = {
    SortField.ORDER: compare_order,
    SortField.PRIORITY: compare_priority,
    SortField.DUE_DATE: compare_due_date,
    SortField.TITLE: compare_title,
}


def sort_tasks(
    tasks: Sequence[Task],
    sort_by: SortField = SortField.ORDER,
    direction: SortDirection = SortDirection.ASC,
) -> list[Task]:
    """Return a sorted copy; descending negates the comparator."""
    compare = COMPARATORS[sort_by]
    if direction == SortDirection.DESC:
        return sorted(tasks, key=cmp_to_key(lambda a, b: compare(b, a)))
    return sorted(tasks, key=cmp_to_key(compare))


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def project(tasks: Sequence[Task], query: Optional[ListQuery] = None) -> list[Task]:
    """Filter then sort *tasks* according to *query*."""
    query = query or ListQuery()
    filtered = [t for t in tasks if matches(t, query)]
    return sort_tasks(filtered, query.sort_by, query.sort_direction)


def group_by_status(tasks: Iterable[Task]) -> dict[TaskStatus, list[Task]]:
    """Split an already-projected sequence into board columns, preserving order."""
    columns: dict[TaskStatus, list[Task]] = {s: [] for s in BOARD_STATUSES}
    for t in tasks:
        columns[t.status].append(t)
    return columns
