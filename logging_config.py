"""Logging setup for hosts of the effect engine.

The engine modules only ever call ``logging.getLogger(__name__)``; whoever
embeds the engine (a simulator, the parse_card tool, a test run) decides
where records go by calling ``setup_logging`` once.

- File output is a rotating UTF-8 log, on by default.
- Console output goes through rich and is off by default, so a host that
  draws its own terminal UI is not disturbed.
- Calling ``setup_logging`` again reconfigures the same handlers instead of
  adding new ones.

Environment overrides (they win over arguments):
    TCG_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR
    TCG_LOG_FILE=path/to/file.log
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from tcg.config import get_config

FILE_HANDLER_NAME = "tcg_file"
CONSOLE_HANDLER_NAME = "tcg_console"
DEFAULT_LOG_PATH = Path("logs") / "tcg.log"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d | %(message)s"


def _parse_level(level: str | int | None, default: int = logging.INFO) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName((level or "").strip().upper())
    return value if isinstance(value, int) else default


def _log_path(log_file: str | None) -> Path:
    path = Path(log_file) if log_file else DEFAULT_LOG_PATH
    if not path.is_absolute():
        path = Path.cwd() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def _named_handler(root: logging.Logger, name: str) -> logging.Handler | None:
    for handler in root.handlers:
        if handler.name == name:
            return handler
    return None


def _file_handler(root: logging.Logger, path: Path, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = _named_handler(root, FILE_HANDLER_NAME)
    if handler is not None and Path(getattr(handler, "baseFilename", "")) != path:
        # Log file moved: drop the old handler
        root.removeHandler(handler)
        handler.close()
        handler = None
    if handler is None:
        handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        handler.name = FILE_HANDLER_NAME
        root.addHandler(handler)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def _console_handler(root: logging.Logger) -> logging.Handler:
    handler = _named_handler(root, CONSOLE_HANDLER_NAME)
    if handler is None:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
        handler.name = CONSOLE_HANDLER_NAME
        root.addHandler(handler)
    return handler


def setup_logging(
    *,
    level: str | int | None = None,
    log_file: str | None = None,
    enable_file: bool = True,
    enable_console: bool = False,
    console_level: str | int = "WARNING",
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 5,
    engine_level: str | int | None = None,
) -> logging.Logger:
    """Configure the root logger for an engine host.

    Args:
        level: file handler level; defaults to ``EngineConfig.log_level``
        log_file: log path (default ``logs/tcg.log`` under the working directory)
        enable_file: attach the rotating file handler
        enable_console: attach the rich console handler
        console_level: console handler level
        max_bytes: rotation size of the log file
        backup_count: rotated files kept
        engine_level: optional level for the ``tcg`` package logger only

    Returns:
        The root logger.
    """
    level = os.environ.get("TCG_LOG_LEVEL") or level or get_config().log_level
    log_file = os.environ.get("TCG_LOG_FILE") or log_file

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # handlers filter

    path = None
    if enable_file:
        path = _log_path(log_file)
        _file_handler(root, path, max_bytes, backup_count).setLevel(_parse_level(level))

    if enable_console:
        _console_handler(root).setLevel(_parse_level(console_level, logging.WARNING))

    if engine_level is not None:
        logging.getLogger("tcg").setLevel(_parse_level(engine_level))

    logging.getLogger(__name__).info(
        "Logging initialized | level=%s file=%s console=%s", level, path, enable_console,
    )
    return root
