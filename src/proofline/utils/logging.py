"""Logging setup shared by the checking, fixing and batch entry points.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed once by whichever host process embeds proofline.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..services.settings import Settings

__all__ = [
    "configure_from_settings",
    "get_log_path",
    "get_logger",
    "reset_logging",
    "setup_logging",
]

LOG_FILE_NAME = "proofline.log"
_DEFAULT_LOG_DIR = Path.home() / ".proofline" / "logs"
_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# Client libraries that log every request at INFO/DEBUG.
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio", "httpx", "httpcore", "openai")
_CONFIGURED = False
_LOG_PATH: Path | None = None


def setup_logging(
    level: int | str | None = None,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Install a rotating ``proofline.log`` handler (plus console) on the root logger.

    ``level`` falls back to ``PROOFLINE_LOG_LEVEL`` and then INFO. The log
    directory falls back to ``PROOFLINE_LOG_DIR`` and then ``~/.proofline/logs``.
    Repeated calls are no-ops unless ``force`` is set.
    """

    global _CONFIGURED, _LOG_PATH
    if _CONFIGURED and not force and _LOG_PATH is not None:
        return _LOG_PATH

    resolved_level = _resolve_level(level)
    target_dir = _resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / LOG_FILE_NAME

    handlers = _build_handlers(
        log_path,
        resolved_level,
        console=console,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    logging.basicConfig(level=resolved_level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    _quiet_client_loggers(resolved_level)

    _CONFIGURED = True
    _LOG_PATH = log_path
    logging.getLogger(__name__).debug("Logging to %s at %s", log_path, logging.getLevelName(resolved_level))
    return log_path


def configure_from_settings(settings: "Settings", **kwargs: Any) -> Path:
    """DEBUG when ``settings.debug_logging`` is on, otherwise the default level."""

    level = logging.DEBUG if settings.debug_logging else kwargs.pop("level", None)
    return setup_logging(level, **kwargs)


def reset_logging() -> None:
    """Forget the configured state so the next :func:`setup_logging` reinstalls handlers."""

    global _CONFIGURED, _LOG_PATH
    _CONFIGURED = False
    _LOG_PATH = None


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def get_log_path() -> Path | None:
    return _LOG_PATH


def _build_handlers(
    log_path: Path,
    level: int,
    *,
    console: bool,
    max_bytes: int,
    backup_count: int,
) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handlers: list[logging.Handler] = [file_handler]
    if console:
        handlers.append(logging.StreamHandler())
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def _resolve_level(level: int | str | None) -> int:
    candidate: int | str | None = level if level is not None else os.environ.get("PROOFLINE_LOG_LEVEL")
    if candidate is None or candidate == "":
        return logging.INFO
    if isinstance(candidate, int):
        return candidate
    named = logging.getLevelName(str(candidate).strip().upper())
    return named if isinstance(named, int) else logging.INFO


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    env_override = os.environ.get("PROOFLINE_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()


def _quiet_client_loggers(root_level: int) -> None:
    quiet_level = max(root_level, logging.WARNING)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)
