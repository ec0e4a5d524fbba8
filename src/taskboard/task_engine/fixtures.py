"""Seed dataset and reset service for the board.

Seed dates are stored as day offsets and materialized against "now" at
reset time, so a freshly reset board always looks current.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from .model import Task, TaskPriority, TaskStatus
from .ordering import order_gaps
from .store import TaskStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedTask:
    id: int
    title: str
    description: str
    status: TaskStatus
    order: int
    priority: TaskPriority
    due_in_days: Optional[int]
    created_days_ago: int


SEED_TASKS: tuple[SeedTask, ...] = (
    SeedTask(
        id=1,
        title="Design user interface mockups",
        description="Create wireframes and high-fidelity designs for the main dashboard",
        status=TaskStatus.TODO,
        order=0,
        priority=TaskPriority.HIGH,
        due_in_days=-2,
        created_days_ago=9,
    ),
    SeedTask(
        id=2,
        title="Set up authentication system",
        description="Implement JWT-based login and registration",
        status=TaskStatus.IN_PROGRESS,
        order=0,
        priority=TaskPriority.MEDIUM,
        due_in_days=1,
        created_days_ago=9,
    ),
    SeedTask(
        id=3,
        title="Deploy to production",
        description="Configure hosting and deployment pipeline",
        status=TaskStatus.DONE,
        order=0,
        priority=TaskPriority.LOW,
        due_in_days=-3,
        created_days_ago=10,
    ),
    SeedTask(
        id=4,
        title="Drag me to another column!",
        description="Check out how the drag and drop works!",
        status=TaskStatus.TODO,
        order=1,
        priority=TaskPriority.LOW,
        due_in_days=10,
        created_days_ago=1,
    ),
    SeedTask(
        id=5,
        title="Add search and priority filters",
        description="Filter cards by text and priority, sort by order, priority, due date or title",
        status=TaskStatus.IN_PROGRESS,
        order=1,
        priority=TaskPriority.HIGH,
        due_in_days=4,
        created_days_ago=5,
    ),
    SeedTask(
        id=6,
        title="Write API documentation",
        description="",
        status=TaskStatus.TODO,
        order=2,
        priority=TaskPriority.MEDIUM,
        due_in_days=None,
        created_days_ago=3,
    ),
)


def build_seed_tasks(
    now: Optional[datetime] = None,
    seeds: tuple[SeedTask, ...] = SEED_TASKS,
) -> list[Task]:
    """Materialize *seeds* into tasks with dates relative to *now*.

    Raises :class:`ValueError` when the seeds do not form dense buckets or
    repeat an id.
    """
    now = now or datetime.now(timezone.utc)
    tasks: list[Task] = []
    for seed in seeds:
        created = (now - timedelta(days=seed.created_days_ago)).isoformat()
        due = (now + timedelta(days=seed.due_in_days)).isoformat() if seed.due_in_days is not None else None
        tasks.append(
            Task(
                id=seed.id,
                title=seed.title,
                order=seed.order,
                description=seed.description,
                status=seed.status,
                priority=seed.priority,
                due_date=due,
                created_at=created,
                updated_at=created,
            )
        )
    if len({t.id for t in tasks}) != len(tasks):
        raise ValueError("Seed tasks repeat an id")
    gaps = order_gaps(tasks)
    if gaps:
        detail = {status.value: orders for status, orders in gaps.items()}
        raise ValueError(f"Seed tasks are not densely ordered: {detail}")
    return tasks


def reset_store(store: TaskStore, seeds: tuple[SeedTask, ...] = SEED_TASKS) -> list[Task]:
    """Replace the store's contents with *seeds* in a single step.

    The id allocator restarts at ``len(seeds) + 1``.
    """
    tasks = build_seed_tasks(seeds=seeds)
    next_id = max([len(tasks)] + [t.id for t in tasks]) + 1
    store.replace_all(tasks, next_id)
    logger.info("Board reset to %d seed tasks", len(tasks))
    return [t.copy() for t in tasks]
