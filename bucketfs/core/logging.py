from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Iterator

from bucketfs.config import Config

CONTEXT_FIELDS = ("bucket", "command", "operation", "key")

# Storage SDK loggers that flood the output below WARNING
LIBRARY_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 3


def _context_of(record: logging.LogRecord) -> dict:
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, timestamped in UTC."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context_of(record))

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=True, default=str)


class TextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname} {record.name}: {record.getMessage()}"
        context = _context_of(record)
        if context:
            line += " " + " ".join(f"{field}={value}" for field, value in context.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _quiet_libraries(level: str) -> None:
    # Library chatter only comes through when debugging
    library_level = logging.NOTSET if level == "DEBUG" else logging.WARNING
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def _handler(handler: logging.Handler, formatter: logging.Formatter) -> logging.Handler:
    handler.setFormatter(formatter)
    return handler


def setup_logger(name: str, config: Config) -> logging.Logger:
    """
    Configure the named logger from the logging settings of a Config.

    Console output uses LOG_FORMAT. A rotating JSON log file is added only when
    LOG_FILE_PATH is set. Calling it again for the same name only updates the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(config.log_level)
    logger.propagate = False
    _quiet_libraries(config.log_level)

    if logger.handlers:
        return logger

    console_formatter = JSONFormatter() if config.log_format == "json" else TextFormatter()
    logger.addHandler(_handler(logging.StreamHandler(), console_formatter))

    if config.log_file_path:
        file_handler = RotatingFileHandler(
            config.log_file_path,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUPS,
        )
        logger.addHandler(_handler(file_handler, JSONFormatter()))

    return logger


@contextmanager
def log_context(logger: logging.Logger, **context) -> Iterator[logging.Logger]:
    """
    Stamp every record created inside the block with the given fields.

    Nested blocks add to the outer fields. Field names must not repeat keys
    passed through ``extra=`` by the code logging inside the block.
    """
    previous = logging.getLogRecordFactory()

    def stamped(*args, **kwargs) -> logging.LogRecord:
        record = previous(*args, **kwargs)
        record.__dict__.update(context)
        return record

    logging.setLogRecordFactory(stamped)
    try:
        yield logger
    finally:
        logging.setLogRecordFactory(previous)
