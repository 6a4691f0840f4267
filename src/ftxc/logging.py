"""Structured logging for the FTX client.

Library modules log through ``get_logger("client")`` and the like; nothing
is configured on import. ``setup_logging`` is for the CLI and for applications
that want the one-line structured format:

    [2024-01-01T00:00:00.000000+00:00] [DEBUG] ftxc.client: sending GET ... | {'extra': 1}
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Root of the ftxc logger namespace
logger = logging.getLogger("ftxc")

# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_KEYS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Timestamp, level and logger name, followed by any ``extra`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        parts = [f"[{created}] [{record.levelname}] {record.name}: {record.getMessage()}"]

        extra_fields: dict[str, Any] = {
            key: value for key, value in vars(record).items() if key not in _RESERVED_RECORD_KEYS
        }
        if extra_fields:
            parts.append(f" | {extra_fields}")

        if record.exc_info:
            parts.append("\n" + self.formatException(record.exc_info))

        return "".join(parts)


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Send ``ftxc`` logs to stderr (and optionally a file) in structured form.

    Calling it again replaces the previously installed handlers.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file to append to, parent directories are created
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logger.setLevel(log_level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(StructuredFormatter())
        logger.addHandler(handler)

    logger.debug("Logging configured", extra={"level": level, "log_file": str(log_file)})


def get_logger(name: str) -> logging.Logger:
    """Return the ``ftxc.<name>`` logger."""
    return logging.getLogger(f"ftxc.{name}")
