"""Task API endpoints for the board.

This module provides a FastAPI router over :class:`TaskEngine`: CRUD,
drag-and-drop moves, filtered listing, the grouped board view and reset.
It is mounted under ``/api/tasks`` by the ``create_app`` factory.
"""

from __future__ import annotations

from typing import Any, Callable, NoReturn, Optional

from fastapi import APIRouter, HTTPException, Query, Response
from loguru import logger
from pydantic import BaseModel

from ..logging_utils import pretty
from ..task_engine.engine import TaskEngine
from ..task_engine.errors import (
    InvalidStatusError,
    NotFoundError,
    TaskEngineError,
    ValidationError,
)
from ..task_engine.projector import ListQuery


# ---------------------------------------------------------------------------
# Pydantic request / response models
# ---------------------------------------------------------------------------

class CreateTaskRequest(BaseModel):
    title: Optional[str] = None
    description: str = ""
    priority: Optional[str] = None
    due_date: Optional[str] = None
    order: Optional[float] = None


class UpdateTaskRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = None
    order: Optional[float] = None


class MoveTaskRequest(BaseModel):
    status: str
    order: Optional[float] = None


class TaskResponse(BaseModel):
    """Standard wrapper for task responses."""
    task: dict[str, Any]


class TaskListResponse(BaseModel):
    tasks: list[dict[str, Any]]
    total: int


class BoardResponse(BaseModel):
    columns: dict[str, list[dict[str, Any]]]


class MoveResponse(BaseModel):
    task: dict[str, Any]
    tasks: list[dict[str, Any]]
    changed: list[int]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _raise_http(exc: TaskEngineError) -> NoReturn:
    if isinstance(exc, NotFoundError):
        raise HTTPException(status_code=404, detail=exc.message) from exc
    if isinstance(exc, (ValidationError, InvalidStatusError)):
        raise HTTPException(status_code=400, detail=exc.message) from exc
    raise HTTPException(status_code=500, detail=exc.message) from exc


def _list_query(
    sort_by: Optional[str],
    sort_direction: Optional[str],
    priority: Optional[str],
    filter_string: Optional[str],
) -> ListQuery:
    return ListQuery.from_params(
        sort_by=sort_by,
        sort_direction=sort_direction,
        priorities=priority,
        search=filter_string,
    )


# ---------------------------------------------------------------------------
# Router factory
# ---------------------------------------------------------------------------

def create_task_router(get_engine: Callable[[], TaskEngine]) -> APIRouter:
    """Create the task API router.

    Parameters
    ----------
    get_engine:
        A zero-argument callable returning the :class:`TaskEngine` that
        backs the board.
    """
    router = APIRouter(prefix="/api/tasks", tags=["tasks"])

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------

    @router.get("", response_model=TaskListResponse)
    async def list_tasks(
        sort_by: Optional[str] = Query(None, alias="sortBy"),
        sort_direction: Optional[str] = Query(None, alias="sortDirection"),
        priority: Optional[str] = Query(None),
        filter_string: Optional[str] = Query(None, alias="filterString"),
    ) -> TaskListResponse:
        engine = get_engine()
        query = _list_query(sort_by, sort_direction, priority, filter_string)
        data = [t.to_dict() for t in engine.list_tasks(query)]
        return TaskListResponse(tasks=data, total=len(data))

    @router.post("", response_model=TaskResponse, status_code=201)
    async def create_task(body: CreateTaskRequest) -> TaskResponse:
        engine = get_engine()
        try:
            task = engine.create_task(**body.model_dump())
        except TaskEngineError as e:
            _raise_http(e)
        return TaskResponse(task=task.to_dict())

    @router.get("/board", response_model=BoardResponse)
    async def get_board(
        sort_by: Optional[str] = Query(None, alias="sortBy"),
        sort_direction: Optional[str] = Query(None, alias="sortDirection"),
        priority: Optional[str] = Query(None),
        filter_string: Optional[str] = Query(None, alias="filterString"),
    ) -> BoardResponse:
        engine = get_engine()
        query = _list_query(sort_by, sort_direction, priority, filter_string)
        columns = engine.get_board(query)
        return BoardResponse(
            columns={status.value: [t.to_dict() for t in tasks] for status, tasks in columns.items()}
        )

    @router.post("/reset", response_model=TaskListResponse)
    async def reset_tasks() -> TaskListResponse:
        engine = get_engine()
        data = [t.to_dict() for t in engine.reset_tasks()]
        logger.info("Board reset via API ({} tasks)", len(data))
        return TaskListResponse(tasks=data, total=len(data))

    # ------------------------------------------------------------------
    # Single task
    # ------------------------------------------------------------------

    @router.get("/{task_id}", response_model=TaskResponse)
    async def get_task(task_id: int) -> TaskResponse:
        engine = get_engine()
        try:
            task = engine.get_task(task_id)
        except TaskEngineError as e:
            _raise_http(e)
        return TaskResponse(task=task.to_dict())

    @router.patch("/{task_id}", response_model=TaskResponse)
    @router.put("/{task_id}", response_model=TaskResponse)
    async def update_task(task_id: int, body: UpdateTaskRequest) -> TaskResponse:
        engine = get_engine()
        changes = body.model_dump(exclude_unset=True)
        try:
            task = engine.update_task(task_id, changes)
        except TaskEngineError as e:
            _raise_http(e)
        return TaskResponse(task=task.to_dict())

    @router.delete("/{task_id}", status_code=204)
    async def delete_task(task_id: int) -> Response:
        engine = get_engine()
        try:
            engine.delete_task(task_id)
        except TaskEngineError as e:
            _raise_http(e)
        return Response(status_code=204)

    @router.put("/{task_id}/move", response_model=MoveResponse)
    async def move_task(task_id: int, body: MoveTaskRequest) -> MoveResponse:
        engine = get_engine()
        try:
            result = engine.move_task(task_id, body.status, body.order)
        except NotFoundError as e:
            logger.warning("Move of unknown task {} rejected ({} tasks on board)", task_id, len(e.snapshot or []))
            logger.debug("Board at rejection: {}", pretty(e.snapshot or []))
            _raise_http(e)
        except TaskEngineError as e:
            _raise_http(e)
        return MoveResponse(**result.to_dict())

    return router
