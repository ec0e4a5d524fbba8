from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from .config import get_logging_level, get_server_config, load_board_config
from .io_utils import _save_data
from .logging_utils import configure_logging
from .server import create_app
from .task_engine.engine import TaskEngine


def _load_config(args: argparse.Namespace) -> dict[str, Any]:
    path: Optional[Path] = Path(args.config) if args.config else None
    config, err = load_board_config(path)
    configure_logging(args.log_level or get_logging_level(config))
    if err:
        logger.warning("Ignoring unreadable config: {}", err)
    return config


def _server(args: argparse.Namespace) -> int:
    config = _load_config(args)
    try:
        import uvicorn
    except ImportError:
        sys.stderr.write("Install server extras: pip install 'taskboard[server]'\n")
        return 1

    server_cfg = get_server_config(config)
    host = args.host or server_cfg["host"]
    port = args.port or server_cfg["port"]
    app = create_app(config=config)
    logger.info("Serving task board on http://{}:{}", host, port)
    uvicorn.run(app, host=host, port=port)
    return 0


def _fixtures(args: argparse.Namespace) -> int:
    _load_config(args)
    engine = TaskEngine()
    columns = {
        status.value: [t.to_dict() for t in tasks]
        for status, tasks in engine.get_board().items()
    }
    payload = {"columns": columns}
    if args.output:
        _save_data(Path(args.output), payload)
        logger.info("Wrote seeded board to {}", args.output)
        return 0
    sys.stdout.write(json.dumps(payload, indent=2) + '\n')
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Kanban task board')
    parser.add_argument('--config', default=None, help='Config file (default: ./taskboard.yaml)')
    parser.add_argument('--log-level', default=None, help='Override logging.level from the config')
    subparsers = parser.add_subparsers(dest='command', required=True)

    server = subparsers.add_parser('server', help='Start the web server')
    server.add_argument('--host', default=None)
    server.add_argument('--port', default=None, type=int)
    server.set_defaults(func=_server)

    fixtures = subparsers.add_parser('fixtures', help='Print the seeded board')
    fixtures.add_argument('--output', default=None, help='Write to a .json/.yaml file instead of stdout')
    fixtures.set_defaults(func=_fixtures)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, 'func', None)
    if handler is None:
        parser.print_help()
        return 1
    return int(handler(args) or 0)


if __name__ == '__main__':
    raise SystemExit(main())
