"""Root logging setup for sensor logger processes."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_SUBDIR = "logs"

_MAX_BYTES = 500 * 1024
_BACKUP_COUNT = 2

_configured = False


def parse_level(level: Union[int, str]) -> int:
    """Accept ``"debug"``/``"INFO"``/``10`` style levels."""
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(str(level).strip().upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    return numeric


def module_log_path(output_dir: Union[str, Path], module_id: str) -> Path:
    """Log file kept next to a module's captures: ``<output>/logs/<module>.log``."""
    return Path(output_dir) / LOG_SUBDIR / f"{module_id.lower()}.log"


def _drop_handlers(root: logging.Logger) -> None:
    for handler in list(root.handlers):
        root.removeHandler(handler)
        try:
            handler.close()
        except OSError:
            pass


def _rotating_file_handler(path: Path, max_bytes: int, backup_count: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    force: bool = False,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = _MAX_BYTES,
    backup_count: int = _BACKUP_COUNT,
    quiet_loggers: Iterable[str] = ("asyncio",),
) -> None:
    """Install stdout and/or rotating file handlers on the root logger.

    After the first call only the level is updated, unless ``force`` is set,
    in which case existing handlers are closed and rebuilt.

    Args:
        level: Logging level, numeric or by name.
        force: Rebuild handlers even if logging was configured already.
        console: Emit records to stdout.
        log_file: Path of a rotating log file, created with its parent.
        max_bytes: Size at which the log file rotates.
        backup_count: Rotated files to keep.
        quiet_loggers: Third-party loggers limited to ERROR.
    """
    global _configured
    numeric_level = parse_level(level)
    root = logging.getLogger()

    if force or not _configured:
        _drop_handlers(root)
        handlers: list[logging.Handler] = []
        if console:
            handlers.append(logging.StreamHandler(sys.stdout))
        if log_file:
            handlers.append(_rotating_file_handler(Path(log_file), max_bytes, backup_count))
        if not handlers:
            handlers.append(logging.NullHandler())

        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
        for handler in handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)
        _configured = True

    root.setLevel(numeric_level)
    for handler in root.handlers:
        handler.setLevel(numeric_level)
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.ERROR)


__all__ = ["LOG_DATEFMT", "LOG_FORMAT", "configure_logging", "module_log_path", "parse_level"]
