"""In-memory task store with lock-guarded transactions.

The store owns the task collection, the id index, the status index and the
id allocator.  All reads and writes go through :meth:`TaskStore.transaction`
or :meth:`TaskStore.read_snapshot`, which hold a single re-entrant lock.
Transactions work on copies and are committed only when the ``with`` block
exits cleanly, so a failing operation never leaves partial state behind.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from .model import BOARD_STATUSES, Task, TaskStatus
from .ordering import Placement, ordered_bucket

_MUTABLE_FIELDS = frozenset({"title", "description", "priority", "due_date"})


class TaskStore:
    """Thread-safe, in-memory store for :class:`Task` objects."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._tasks: dict[int, Task] = {}
        self._by_status: dict[TaskStatus, list[int]] = {s: [] for s in BOARD_STATUSES}
        self._next_id = 1

    # -- internal helpers ---------------------------------------------------

    def _commit(self, tasks: list[Task], next_id: int) -> None:
        self._tasks = {t.id: t for t in tasks}
        self._by_status = {
            status: [t.id for t in ordered_bucket(tasks, status)] for status in BOARD_STATUSES
        }
        self._next_id = next_id

    # -- public API ---------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[_TaskTx]:
        """Acquire the lock, copy the tasks, yield a transaction, commit on exit.

        Usage::

            with store.transaction() as tx:
                task = tx.get(3)
                tx.apply({3: (TaskStatus.DONE, 0)})
                # committed on exit, discarded if the block raises
        """
        with self._lock:
            tx = _TaskTx(
                [t.copy() for t in self._tasks.values()],
                self._next_id,
                by_status={s: list(ids) for s, ids in self._by_status.items()},
            )
            yield tx
            if tx.dirty:
                self._commit(tx.tasks, tx.next_id)

    def read_snapshot(self) -> list[Task]:
        """Return copies of every task, in insertion order."""
        with self._lock:
            return [t.copy() for t in self._tasks.values()]

    def get_one(self, task_id: int) -> Optional[Task]:
        with self._lock:
            task = self._tasks.get(task_id)
            return task.copy() if task is not None else None

    def bucket(self, status: TaskStatus) -> list[Task]:
        """Return copies of one bucket's tasks in stored order."""
        with self._lock:
            return [self._tasks[tid].copy() for tid in self._by_status[status]]

    def count(self, status: Optional[TaskStatus] = None) -> int:
        with self._lock:
            if status is None:
                return len(self._tasks)
            return len(self._by_status[status])

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    def replace_all(self, tasks: list[Task], next_id: int) -> None:
        """Swap the whole collection in one step."""
        with self._lock:
            self._commit([t.copy() for t in tasks], next_id)


class _TaskTx:
    """In-memory transaction over copies of the store's tasks.

    Mutations are flushed back to the store when the ``transaction``
    context-manager exits without an exception.
    """

    def __init__(
        self,
        tasks: list[Task],
        next_id: int,
        by_status: Optional[dict[TaskStatus, list[int]]] = None,
    ) -> None:
        self.tasks = tasks
        self.next_id = next_id
        self.dirty = False
        self._index: dict[int, Task] = {t.id: t for t in tasks}
        # Bucket id lists in stored order; dropped on any structural write
        # and rebuilt from the tasks on next use.
        self._by_status = by_status

    # -- lookups ------------------------------------------------------------

    def get(self, task_id: int) -> Optional[Task]:
        return self._index.get(task_id)

    def list_all(self) -> list[Task]:
        return list(self.tasks)

    def bucket(self, status: TaskStatus) -> list[Task]:
        """Return one bucket's tasks in stored order, read from the status index."""
        if self._by_status is None:
            self._by_status = {
                s: [t.id for t in ordered_bucket(self.tasks, s)] for s in BOARD_STATUSES
            }
        return [self._index[tid] for tid in self._by_status[status]]

    def buckets(self, *statuses: TaskStatus) -> list[Task]:
        """Concatenate the given buckets (each status once) for the planners."""
        out: list[Task] = []
        for status in dict.fromkeys(statuses):
            out.extend(self.bucket(status))
        return out

    def snapshot(self) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self.tasks]

    # -- mutations ----------------------------------------------------------

    def allocate_id(self) -> int:
        tid = self.next_id
        self.next_id += 1
        self.dirty = True
        return tid

    def add(self, task: Task) -> Task:
        if task.id in self._index:
            raise ValueError(f"Task {task.id} already exists")
        self._index[task.id] = task
        self.tasks.append(task)
        self._by_status = None
        if task.id >= self.next_id:
            self.next_id = task.id + 1
        self.dirty = True
        return task

    def update(self, task_id: int, changes: dict[str, Any]) -> Optional[Task]:
        """Copy plain field edits onto a task; status/order go through :meth:`apply`."""
        task = self.get(task_id)
        if task is None:
            return None
        for key, value in changes.items():
            if key not in _MUTABLE_FIELDS:
                raise ValueError(f"Field '{key}' cannot be edited directly")
            setattr(task, key, value)
        task.touch()
        self.dirty = True
        return task

    def apply(self, placements: dict[int, Placement]) -> list[Task]:
        """Write ``(status, order)`` placements back, returning the touched tasks."""
        touched: list[Task] = []
        for task_id, (status, order) in placements.items():
            task = self._index[task_id]
            task.place(status, order)
            touched.append(task)
        if touched:
            self.dirty = True
            self._by_status = None
        return touched

    def hard_remove(self, task_id: int) -> bool:
        task = self._index.pop(task_id, None)
        if task is None:
            return False
        self.tasks = [t for t in self.tasks if t.id != task_id]
        self._by_status = None
        self.dirty = True
        return True
