"""Load optional board configuration from `taskboard.yaml`."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .io_utils import _load_data_with_error
from .task_engine.model import DEFAULT_DESCRIPTION_MAX_LENGTH, DEFAULT_TITLE_MAX_LENGTH

CONFIG_FILE = "taskboard.yaml"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_LOG_LEVEL = "INFO"

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


def load_board_config(path: Path | None = None) -> tuple[dict[str, Any], str | None]:
    """Load the optional config file.

    Args:
        path: Config file path; defaults to `taskboard.yaml` in the working directory.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    path = (path or Path.cwd() / CONFIG_FILE).expanduser()
    data, err = _load_data_with_error(path, {})
    if err:
        return {}, err
    return data, None


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    raw = _get_nested(config, name)
    return raw if isinstance(raw, dict) else {}


def _positive_int(raw: Any, default: int) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw <= 0:
        return default
    return raw


def get_server_config(config: dict[str, Any]) -> dict[str, Any]:
    """Extract `server.host` / `server.port`, falling back to defaults."""
    raw = _section(config, "server")
    host = raw.get("host")
    return {
        "host": host if isinstance(host, str) and host else DEFAULT_HOST,
        "port": _positive_int(raw.get("port"), DEFAULT_PORT),
    }


def get_cors_config(config: dict[str, Any]) -> dict[str, Any]:
    """Extract the CORS block.

    Returns:
        `{"enabled": bool, "allowed_origins": list[str]}`; CORS is on and
        open to every origin unless configured otherwise.
    """
    raw = _section(config, "cors")
    origins = raw.get("allowed_origins")
    if isinstance(origins, str):
        origins = [origins]
    if not isinstance(origins, list) or not origins:
        origins = ["*"]
    return {
        "enabled": bool(raw.get("enabled", True)),
        "allowed_origins": [str(o) for o in origins],
    }


def get_logging_level(config: dict[str, Any]) -> str:
    raw = _get_nested(config, "logging", "level")
    if isinstance(raw, str) and raw.upper() in VALID_LOG_LEVELS:
        return raw.upper()
    return DEFAULT_LOG_LEVEL


def get_limits_config(config: dict[str, Any]) -> dict[str, int]:
    raw = _section(config, "limits")
    return {
        "title_max_length": _positive_int(raw.get("title_max_length"), DEFAULT_TITLE_MAX_LENGTH),
        "description_max_length": _positive_int(
            raw.get("description_max_length"), DEFAULT_DESCRIPTION_MAX_LENGTH
        ),
    }


def get_seed_on_start(config: dict[str, Any]) -> bool:
    raw = _get_nested(config, "fixtures", "seed_on_start")
    return raw if isinstance(raw, bool) else True
