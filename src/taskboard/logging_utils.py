"""Logging setup and log formatting helpers."""

import json
import logging
import sys
from typing import Any

from loguru import logger


def configure_logging(level: str = "INFO") -> None:
    """Configure the loguru logger with the specified level.

    The standard library root logger (used by the task engine modules) is
    set to the same level.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan> - "
            "{message}"
        ),
    )
    std_level = logging.getLevelName(level.upper())
    if not isinstance(std_level, int):
        std_level = logging.INFO
    logging.basicConfig(
        level=std_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s - %(message)s",
    )
    # basicConfig is a no-op once the root logger has handlers (uvicorn, pytest).
    logging.getLogger().setLevel(std_level)


def pretty(obj: Any, *, indent: int = 2) -> str:
    """Serialize an object as JSON for readable logs.

    Args:
        obj: Object to serialize.
        indent: Indentation level for JSON output.

    Returns:
        A JSON string when possible; otherwise `str(obj)`.
    """
    try:
        return json.dumps(obj, indent=indent, default=str)
    except (TypeError, ValueError):
        return str(obj)
