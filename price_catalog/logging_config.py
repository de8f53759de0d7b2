"""Logging setup: readable console output plus JSON files for log shipping."""

import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger import jsonlogger

from price_catalog.config import settings

SERVICE_NAME = "price-catalog"

# Per-request chatter from these libraries drowns out catalog events
NOISY_LOGGERS = ("httpx", "httpcore", "apscheduler", "uvicorn.access")


class CatalogJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping every record with service and source fields."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = SERVICE_NAME
        log_record["source"] = f"{record.filename}:{record.lineno}"


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(base_dir: str | Path | None = None):
    """Configure root logging for the catalog service.

    Args:
        base_dir: Directory that receives the `log_dir` folder.
                  Defaults to the current working directory.
    """
    logs_dir = (Path(base_dir) if base_dir else Path.cwd()) / settings.log_dir
    logs_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.log_level.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root_logger.addHandler(console_handler)

    json_formatter = CatalogJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    root_logger.addHandler(_file_handler(logs_dir / "catalog.log", logging.DEBUG, json_formatter))
    root_logger.addHandler(_file_handler(logs_dir / "error.log", logging.ERROR, json_formatter))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter carrying catalog context (category id, page) on every record.

    The context lands as JSON fields in the file logs and as a
    `[key=value]` prefix on the console line.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        if self.extra:
            context = " ".join(f"{key}={value}" for key, value in self.extra.items())
            msg = f"[{context}] {msg}"
        return msg, kwargs


def get_logger(name: str, **context) -> LoggerAdapter:
    """
    Get a logger with context fields.

    Args:
        name: Logger name (usually __name__)
        **context: Context fields, e.g. category_id=7224

    Returns:
        LoggerAdapter with context
    """
    return LoggerAdapter(logging.getLogger(name), context)
