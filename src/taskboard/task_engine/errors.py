"""Error types raised by the task engine.

All three are recoverable caller errors.  The HTTP layer maps
:class:`ValidationError` and :class:`InvalidStatusError` to 400 and
:class:`NotFoundError` to 404.
"""

from __future__ import annotations

from typing import Any, Optional


class TaskEngineError(Exception):
    """Base class for task engine failures.

    ``snapshot`` optionally holds the store's state (as task dicts) from
    before the failing call, for diagnostics.  The store itself is never
    modified by a failing call.
    """

    def __init__(self, message: str, *, snapshot: Optional[list[dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.snapshot = snapshot


class ValidationError(TaskEngineError):
    """A required field is missing or a field value is malformed."""


class NotFoundError(TaskEngineError):
    """No task with the requested id exists."""

    def __init__(
        self,
        task_id: Any,
        *,
        snapshot: Optional[list[dict[str, Any]]] = None,
    ) -> None:
        super().__init__(f"Task {task_id} not found", snapshot=snapshot)
        self.task_id = task_id


class InvalidStatusError(TaskEngineError):
    """A status value outside ``todo | in-progress | done``."""
