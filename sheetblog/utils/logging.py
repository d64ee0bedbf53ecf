"""
SheetBlog Logging
=================

Logger wiring for the post pipeline. Every component logs through a
``sheetblog.<component>`` logger whose records carry the component name
and, where known, the post source they concern.
"""

import json
import logging
import logging.handlers
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional

ROOT_LOGGER = "sheetblog"
CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"

# Attributes every LogRecord has; anything else arrived through ``extra``
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` context flattened in."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ComponentLogger(logging.LoggerAdapter):
    """Adds component context without discarding per-call ``extra``."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger_for_component(
    component_name: str,
    source_url: Optional[str] = None,
) -> ComponentLogger:
    """Get a logger for one pipeline component.

    Args:
        component_name: Component name, e.g. ``source_fetcher``
        source_url: Post source the logger is bound to (optional)
    """
    context = {"component": component_name}
    if source_url:
        context["source_url"] = source_url
    return ComponentLogger(logging.getLogger(f"{ROOT_LOGGER}.{component_name}"), context)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    structured_logging: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Install handlers on the ``sheetblog`` logger.

    The console goes to stderr so command output on stdout stays clean.
    The rotating log file is always JSON lines.

    Args:
        log_level: Level name for the package logger
        log_file: Rotating log file path; falsy disables file logging
        enable_console: Log to stderr
        structured_logging: JSON lines on the console too
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files to keep
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if enable_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(
            JsonLineFormatter() if structured_logging else logging.Formatter(CONSOLE_FORMAT, "%H:%M:%S")
        )
        logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setFormatter(JsonLineFormatter())
        logger.addHandler(file_handler)

    # aiohttp logs every connection problem we already report as SourceError
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return logger


class PerformanceLogger:
    """Times one pipeline stage (fetch, parse) and logs its outcome.

    Exceptions are logged with the elapsed time and then re-raised.
    """

    def __init__(self, logger, stage: str, **context):
        self.logger = logger
        self.stage = stage
        self.context = context
        self._started = 0.0

    @property
    def elapsed(self) -> float:
        return time.perf_counter() - self._started

    def __enter__(self) -> "PerformanceLogger":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        elapsed = self.elapsed
        extra = {**self.context, "stage": self.stage, "elapsed_ms": round(elapsed * 1000, 1)}
        if exc_type is None:
            self.logger.debug(f"{self.stage} finished in {elapsed:.3f}s", extra=extra)
        else:
            self.logger.warning(
                f"{self.stage} failed after {elapsed:.3f}s: {exc_type.__name__}", extra=extra
            )
