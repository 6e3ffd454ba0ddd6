"""
Structured logging for ChatFS.

Console output is human-readable in debug mode and JSON otherwise; the rotating
log file is always JSON. Event helpers attach their fields through `extra=`,
so they show up under "extra" in the JSON records.
"""

import json
import logging
import logging.handlers
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from config.app_config import get_config


# Attributes every LogRecord has; anything else came in through `extra=`
_RESERVED_RECORD_KEYS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Render each record as one JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RESERVED_RECORD_KEYS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging() -> logging.Logger:
    """
    Configure the root logger from the application config

    Returns:
        The root logger
    """
    config = get_config()
    level = getattr(logging, config.logging.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(config.logging.format) if config.debug else StructuredFormatter()
    )
    root_logger.addHandler(console)

    if config.logging.enable_file_logging:
        log_file = Path(config.logging.log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def _log_event(logger: logging.Logger, level: int, message: str, event_type: str, **fields):
    logger.log(level, message, extra={
        "event_type": event_type,
        "timestamp": datetime.now().isoformat(),
        **fields
    })


@contextmanager
def log_execution_time(logger: logging.Logger, operation: str, **extra_fields):
    """
    Log how long the wrapped block takes

    Failures are logged at INFO with the error type and re-raised; callers decide
    whether a failure deserves a warning.
    """
    started = time.perf_counter()
    logger.debug(f"{operation} started", extra={"operation": operation, **extra_fields})

    try:
        yield
    except Exception as e:
        logger.info(f"{operation} failed: {e}", extra={
            "operation": operation,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "status": "error",
            "error_type": type(e).__name__,
            **extra_fields
        })
        raise

    logger.debug(f"{operation} finished", extra={
        "operation": operation,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        "status": "success",
        **extra_fields
    })


def log_user_interaction(logger: logging.Logger, interaction_type: str, **details):
    """Record a user action such as "message_sent" or "reaction_toggled" """
    _log_event(logger, logging.INFO, f"User action: {interaction_type}", "user_interaction",
               interaction_type=interaction_type, **details)


def log_fallback_used(logger: logging.Logger, operation: str, diagnostic: str, **details):
    """
    Record that a backend operation was answered from fallback data

    Args:
        logger: Logger instance
        operation: Backend operation name, e.g. "read_file_content"
        diagnostic: Why the live call failed
        **details: Operation inputs (path, query, ...)
    """
    _log_event(logger, logging.WARNING, f"Serving fallback for {operation}: {diagnostic}", "fallback",
               operation=operation, diagnostic=diagnostic, **details)


def log_conversation_event(logger: logging.Logger, event_type: str, thread_id: str, **details):
    """Record a thread event such as "created", "message_added" or "model_changed" """
    _log_event(logger, logging.INFO, f"Thread {event_type}", "conversation_event",
               conversation_event_type=event_type, thread_id=thread_id, **details)


class ErrorTracker:
    """Counts unexpected errors per (type, context) and logs them with tracebacks"""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.error_counts: Dict[str, int] = {}

    def track_error(self, error: Exception, context: str = "", **extra_info):
        key = f"{type(error).__name__}:{context}"
        self.error_counts[key] = self.error_counts.get(key, 0) + 1

        self.logger.error(f"Error in {context or 'unknown context'}: {error}", exc_info=error, extra={
            "event_type": "error",
            "error_type": type(error).__name__,
            "context": context,
            "error_count": self.error_counts[key],
            **extra_info
        })

    def get_error_summary(self) -> Dict[str, Any]:
        return {
            "total_errors": sum(self.error_counts.values()),
            "unique_errors": len(self.error_counts),
            "error_breakdown": dict(self.error_counts),
        }


_logging_configured = False
_error_tracker: Optional[ErrorTracker] = None


def initialize_logging() -> ErrorTracker:
    """Configure logging once per process and return the shared error tracker"""
    global _logging_configured, _error_tracker

    if not _logging_configured:
        setup_logging()
        _logging_configured = True

    if _error_tracker is None:
        _error_tracker = ErrorTracker(logging.getLogger("chatfs"))

    return _error_tracker
