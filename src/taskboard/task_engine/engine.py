"""Task engine: the synchronous API the HTTP layer calls into.

Wraps :class:`TaskStore` with input cleaning, the move/reorder planner and
the read-side projector.  Every mutating call runs inside one store
transaction, so a call that raises leaves the board exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .errors import NotFoundError, ValidationError
from .fixtures import reset_store
from .model import (
    DEFAULT_DESCRIPTION_MAX_LENGTH,
    DEFAULT_TITLE_MAX_LENGTH,
    Task,
    TaskPriority,
    TaskStatus,
    clean_description,
    clean_title,
    parse_due_date,
    parse_priority,
    parse_status,
)
from .ordering import normalize_order, plan_insert, plan_move, plan_removal
from .projector import ListQuery, group_by_status, project
from .store import TaskStore

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"title", "description", "priority", "due_date", "status", "order"})


@dataclass(frozen=True)
class MoveResult:
    """A completed move: the moved task, the renumbered board, and what changed."""

    task: Task
    tasks: list[Task]
    changed: tuple[int, ...]

    @property
    def is_noop(self) -> bool:
        return not self.changed

    def to_dict(self) -> dict[str, Any]:
        return {
            "task": self.task.to_dict(),
            "tasks": [t.to_dict() for t in self.tasks],
            "changed": list(self.changed),
        }


class TaskEngine:
    """Manage the tasks on one board.

    Parameters
    ----------
    store:
        Store to operate on; a fresh :class:`TaskStore` when omitted.
    seed:
        Load the seed dataset on construction.
    title_max_length / description_max_length:
        Truncation limits applied to incoming text.
    """

    def __init__(
        self,
        store: Optional[TaskStore] = None,
        *,
        seed: bool = True,
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
        description_max_length: int = DEFAULT_DESCRIPTION_MAX_LENGTH,
    ) -> None:
        self.store = store if store is not None else TaskStore()
        self.title_max_length = title_max_length
        self.description_max_length = description_max_length
        if seed:
            self.reset_tasks()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def create_task(
        self,
        title: Any,
        description: Any = "",
        priority: Any = TaskPriority.MEDIUM,
        due_date: Any = None,
        order: Any = None,
    ) -> Task:
        """Create a task in ``todo``.

        Without *order* the task is appended; otherwise it is inserted at the
        clamped rank and the tail of the bucket shifts down.
        """
        clean = clean_title(title, self.title_max_length)
        text = clean_description(description, self.description_max_length)
        prio = parse_priority(priority if priority is not None else TaskPriority.MEDIUM)
        due = parse_due_date(due_date)

        with self.store.transaction() as tx:
            position, shifted = plan_insert(tx.bucket(TaskStatus.TODO), TaskStatus.TODO, normalize_order(order))
            tx.apply(shifted)
            task = Task(
                id=tx.allocate_id(),
                title=clean,
                order=position,
                description=text,
                status=TaskStatus.TODO,
                priority=prio,
                due_date=due,
            )
            tx.add(task)
            created = task.copy()

        logger.info("Created task %s at todo[%d]: %s", created.id, created.order, created.title)
        return created

    def get_task(self, task_id: int) -> Task:
        task = self.store.get_one(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    def list_tasks(self, query: Optional[ListQuery] = None) -> list[Task]:
        """Filtered, sorted copies of the tasks; stored order is untouched."""
        return project(self.store.read_snapshot(), query)

    def get_board(self, query: Optional[ListQuery] = None) -> dict[TaskStatus, list[Task]]:
        """Return the projected tasks grouped into the three board columns."""
        return group_by_status(self.list_tasks(query))

    def update_task(self, task_id: int, changes: dict[str, Any]) -> Task:
        """Apply partial updates to a task.

        A different ``status``, or an explicit ``order``, turns the update
        into a move so both buckets stay densely numbered.  A status change
        without an order appends to the end of the destination bucket.

        ``None`` for ``title``, ``priority``, ``status`` or ``order`` leaves
        that field unchanged; ``None`` for ``description`` or ``due_date``
        clears it.
        """
        unknown = sorted(set(changes) - _UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown task fields: {unknown}")

        fields: dict[str, Any] = {}
        if changes.get("title") is not None:
            fields["title"] = clean_title(changes["title"], self.title_max_length)
        if "description" in changes:
            fields["description"] = clean_description(changes["description"], self.description_max_length)
        if changes.get("priority") is not None:
            fields["priority"] = parse_priority(changes["priority"])
        if "due_date" in changes:
            fields["due_date"] = parse_due_date(changes["due_date"])
        target = parse_status(changes["status"]) if changes.get("status") is not None else None
        has_order = changes.get("order") is not None
        new_order = normalize_order(changes.get("order"))

        with self.store.transaction() as tx:
            task = tx.get(task_id)
            if task is None:
                raise NotFoundError(task_id, snapshot=tx.snapshot())
            if fields:
                tx.update(task_id, fields)
            if (target is not None and target != task.status) or has_order:
                destination = target or task.status
                plan = plan_move(tx.buckets(task.status, destination), task_id, destination, new_order)
                tx.apply(plan.placements)
            updated = task.copy()

        logger.info("Updated task %s fields=%s", task_id, sorted(changes))
        return updated

    def delete_task(self, task_id: int) -> bool:
        """Remove a task and compact the bucket it leaves behind."""
        with self.store.transaction() as tx:
            task = tx.get(task_id)
            if task is None:
                raise NotFoundError(task_id, snapshot=tx.snapshot())
            placements = plan_removal(tx.bucket(task.status), task_id)
            tx.hard_remove(task_id)
            tx.apply(placements)

        logger.info("Deleted task %s from %s (%d renumbered)", task_id, task.status.value, len(placements))
        return True

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def move_task(self, task_id: int, status: Any, order: Any = None) -> MoveResult:
        """Move a task to *status* at rank *order* (``None`` appends).

        Out-of-range ranks are clamped.  Raises :class:`InvalidStatusError`
        for an unknown status and :class:`NotFoundError` (carrying the
        pre-move snapshot) for an unknown id.
        """
        target = parse_status(status)
        new_order = normalize_order(order)

        with self.store.transaction() as tx:
            task = tx.get(task_id)
            if task is None:
                raise NotFoundError(task_id, snapshot=tx.snapshot())
            plan = plan_move(tx.buckets(task.status, target), task_id, target, new_order)
            if plan.is_noop:
                logger.debug("Move of task %s to %s[%d] is a no-op", task_id, target.value, plan.position)
            else:
                tx.apply(plan.placements)
            result = MoveResult(
                task=task.copy(),
                tasks=[t.copy() for t in tx.list_all()],
                changed=tuple(plan.placements),
            )

        if not result.is_noop:
            logger.info(
                "Moved task %s %s -> %s[%d] (%d placements)",
                task_id,
                plan.source.value,
                target.value,
                plan.position,
                len(plan.placements),
            )
        return result

    # ------------------------------------------------------------------
    # Reset
    # ------------------------------------------------------------------

    def reset_tasks(self) -> list[Task]:
        """Replace the whole board with the seed dataset."""
        return reset_store(self.store)
