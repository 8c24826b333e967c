"""
Templar Logging Configuration

Logs go to stderr so that compiled requests and raw responses printed on stdout
can be piped. Structured fields attached by the runner (method, url, status,
elapsed_ms, ...) are rendered as ``key=value`` pairs after the message.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import get_config

# Loggers aiohttp uses on the client side of a round trip
HTTP_LOGGERS = ("aiohttp.client", "aiohttp.internal")


def _render_value(value: Any) -> str:
    text = str(value)
    if not text or any(c.isspace() or c in "=\"" for c in text):
        return repr(text)
    return text


class StructuredFormatter(logging.Formatter):
    """Formatter appending a record's structured fields as ``key=value`` pairs."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        fields = getattr(record, "structured_data", None)
        if not fields:
            return line
        pairs = " ".join(f"{key}={_render_value(value)}" for key, value in fields.items())
        return f"{line} {pairs}"


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
    enable_structured: bool = True,
) -> None:
    """
    Configure logging for Templar.

    Args:
        log_level: Level of the ``templar`` loggers (configured level if None)
        log_file: Rotating log file (configured path if None, none if unset)
        enable_structured: Render structured fields attached to records
    """
    config = get_config()
    level = log_level or config.logging.level
    http_level = config.logging.http_level

    if log_file is None and config.logging.file_path:
        log_file = Path(config.logging.file_path)

    formatter = "structured" if enable_structured else "plain"
    handlers = ["console"]
    logging_config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%H:%M:%S",
            },
            "structured": {
                "()": StructuredFormatter,
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": sys.stderr,
            }
        },
    }

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logging_config["formatters"]["file"] = {
            "()": StructuredFormatter,
            "format": "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s",
        }
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "file",
            "filename": str(log_file),
            "maxBytes": config.logging.max_file_size,
            "backupCount": config.logging.backup_count,
            "encoding": "utf-8",
        }
        handlers.append("file")

    logging_config["loggers"] = {
        "templar": {"level": level, "handlers": handlers, "propagate": False},
        **{
            name: {"level": http_level, "handlers": handlers, "propagate": False}
            for name in HTTP_LOGGERS
        },
    }
    logging_config["root"] = {"level": "WARNING", "handlers": handlers}

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_structured(
    logger: logging.Logger, level: int, message: str, **structured_data: Any
) -> None:
    """
    Log a message with fields rendered by ``StructuredFormatter``.

    Example:
        log_structured(logger, logging.INFO, "Response received", status=200)
    """
    if logger.isEnabledFor(level):
        logger.log(
            level, message, extra={"structured_data": structured_data}, stacklevel=2
        )
