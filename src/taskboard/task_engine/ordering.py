"""Move/reorder planning for status buckets.

Every function here is pure: it reads a sequence of tasks and returns the
``(status, order)`` placements that must be written back to keep each
bucket densely numbered ``0..n-1``.  Only placements that differ from the
stored values are returned, so an empty result means nothing to write.

Same-bucket and cross-bucket moves share one code path: the moved task is
lifted out of its bucket, inserted into the destination list at the clamped
position, and both lists are renumbered in sequence.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import NotFoundError
from .model import BOARD_STATUSES, Task, TaskStatus

Placement = tuple[TaskStatus, int]


# ---------------------------------------------------------------------------
# Input normalization
# ---------------------------------------------------------------------------

def normalize_order(raw: Any) -> Optional[int]:
    """Turn a caller-supplied rank into a non-negative int.

    ``None`` (and positive infinity) means "end of bucket" and is returned as
    ``None``.  Numeric strings are read as floats, so ``"2.0"`` and ``2.0``
    agree.  Negative, fractional, NaN and non-numeric values clamp to 0.
    Upper clamping happens at planning time, against the destination size.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return max(0, raw)
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError:
            return 0
    if isinstance(raw, float):
        if math.isinf(raw) and raw > 0:
            return None
        if math.isfinite(raw) and raw.is_integer():
            return max(0, int(raw))
        return 0
    return 0


# ---------------------------------------------------------------------------
# Bucket helpers
# ---------------------------------------------------------------------------

def ordered_bucket(tasks: Iterable[Task], status: TaskStatus) -> list[Task]:
    """Return the tasks of one bucket sorted by stored order (id breaks ties)."""
    return sorted((t for t in tasks if t.status == status), key=lambda t: (t.order, t.id))


def _renumber(bucket: Sequence[Task], status: TaskStatus) -> dict[int, Placement]:
    return {t.id: (status, i) for i, t in enumerate(bucket)}


def _changed(tasks: Iterable[Task], wanted: dict[int, Placement]) -> dict[int, Placement]:
    out: dict[int, Placement] = {}
    for t in tasks:
        target = wanted.get(t.id)
        if target is not None and (t.status, t.order) != target:
            out[t.id] = target
    return out


def clamp_position(new_order: Optional[int], length: int) -> int:
    if new_order is None:
        return length
    return max(0, min(new_order, length))


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MovePlan:
    """Outcome of :func:`plan_move`.

    ``placements`` holds only the tasks whose status/order must change,
    the moved task included.  An empty dict means the move is a no-op.
    """

    task_id: int
    source: TaskStatus
    target: TaskStatus
    position: int
    placements: dict[int, Placement] = field(default_factory=dict)

    @property
    def is_noop(self) -> bool:
        return not self.placements


def plan_move(
    tasks: Sequence[Task],
    task_id: int,
    target: TaskStatus,
    new_order: Optional[int],
) -> MovePlan:
    """Plan moving *task_id* to *target* at rank *new_order*.

    *new_order* is clamped to ``[0, len(destination without the task)]``;
    ``None`` appends to the end.  Raises :class:`NotFoundError` when the id
    is unknown.
    """
    moving = next((t for t in tasks if t.id == task_id), None)
    if moving is None:
        raise NotFoundError(task_id)

    source = moving.status
    remaining = [t for t in ordered_bucket(tasks, source) if t.id != task_id]
    if target == source:
        destination = list(remaining)
    else:
        destination = ordered_bucket(tasks, target)

    position = clamp_position(new_order, len(destination))
    destination.insert(position, moving)

    wanted: dict[int, Placement] = {}
    if target != source:
        wanted.update(_renumber(remaining, source))
    wanted.update(_renumber(destination, target))

    return MovePlan(
        task_id=task_id,
        source=source,
        target=target,
        position=position,
        placements=_changed(tasks, wanted),
    )


def plan_insert(
    tasks: Sequence[Task],
    status: TaskStatus,
    new_order: Optional[int],
) -> tuple[int, dict[int, Placement]]:
    """Plan room for a new task in *status*.

    Returns the clamped position for the newcomer and the placements of the
    existing tasks that shift down to make room.
    """
    bucket = ordered_bucket(tasks, status)
    position = clamp_position(new_order, len(bucket))
    wanted = {t.id: (status, i if i < position else i + 1) for i, t in enumerate(bucket)}
    return position, _changed(bucket, wanted)


def plan_removal(tasks: Sequence[Task], task_id: int) -> dict[int, Placement]:
    """Plan compacting the bucket *task_id* leaves behind.

    Raises :class:`NotFoundError` when the id is unknown.
    """
    leaving = next((t for t in tasks if t.id == task_id), None)
    if leaving is None:
        raise NotFoundError(task_id)
    remaining = [t for t in ordered_bucket(tasks, leaving.status) if t.id != task_id]
    return _changed(remaining, _renumber(remaining, leaving.status))


def plan_repair(tasks: Sequence[Task]) -> dict[int, Placement]:
    """Renumber every bucket densely, keeping relative order."""
    wanted: dict[int, Placement] = {}
    for status in BOARD_STATUSES:
        wanted.update(_renumber(ordered_bucket(tasks, status), status))
    return _changed(tasks, wanted)


# ---------------------------------------------------------------------------
# Invariant checks
# ---------------------------------------------------------------------------

def order_gaps(tasks: Iterable[Task]) -> dict[TaskStatus, list[int]]:
    """Return the sorted orders of every bucket that is not exactly ``0..n-1``."""
    buckets: dict[TaskStatus, list[int]] = {s: [] for s in BOARD_STATUSES}
    for t in tasks:
        buckets[t.status].append(t.order)
    bad: dict[TaskStatus, list[int]] = {}
    for status, orders in buckets.items():
        orders.sort()
        if orders != list(range(len(orders))):
            bad[status] = orders
    return bad


def is_dense(tasks: Iterable[Task]) -> bool:
    return not order_gaps(tasks)
