"""FastAPI web server for the task board."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .. import __version__
from ..config import get_cors_config, get_limits_config, get_seed_on_start
from ..task_engine.engine import TaskEngine
from .task_api import create_task_router


def create_app(
    engine: Optional[TaskEngine] = None,
    config: Optional[dict[str, Any]] = None,
    enable_cors: Optional[bool] = None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        engine: Engine backing the board; built from *config* when omitted.
        config: Parsed board config (see `taskboard.config`).
        enable_cors: Overrides `cors.enabled` from the config.

    Returns:
        Configured FastAPI app.
    """
    config = config or {}
    cors = get_cors_config(config)
    if enable_cors is not None:
        cors["enabled"] = enable_cors

    if engine is None:
        engine = TaskEngine(seed=get_seed_on_start(config), **get_limits_config(config))

    app = FastAPI(
        title="Task Board",
        description="Kanban task board with ordered columns and drag-and-drop moves",
        version=__version__,
    )

    if cors["enabled"]:
        allow_all = "*" in cors["allowed_origins"]
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors["allowed_origins"],
            allow_credentials=not allow_all,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.engine = engine
    app.state.cors = cors

    def _get_engine() -> TaskEngine:
        return app.state.engine

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Task Board",
            "version": __version__,
            "status": "running",
        }

    @app.get("/api/system/status")
    async def system_status():
        """Report the effective CORS settings and board size."""
        return {
            "cors": dict(app.state.cors),
            "tasks": app.state.engine.store.count(),
            "version": __version__,
        }

    app.include_router(create_task_router(_get_engine))
    logger.debug("Task board app created (cors={})", cors["enabled"])
    return app
