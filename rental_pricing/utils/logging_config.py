"""
Structured Logging

One JSON object per line in production, a readable line in development.
Every record carries the request id (and the caller once authenticated);
pricing and availability mutations add the entity they touched:

    logger.log_with_context(logging.INFO, "Price saved",
                            entity_type="price", entity_id=price.id, amount="450.00")
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional, Any, Dict
from contextvars import ContextVar

SERVICE_NAME = "rental-pricing-engine"

request_id_var: ContextVar[str] = ContextVar('request_id', default='')
user_id_var: ContextVar[str] = ContextVar('user_id', default='')

# LogRecord attributes set through `extra=`
_ENTITY_TYPE = "entity_type"
_ENTITY_ID = "entity_id"
_DATA = "extra_data"


class JSONFormatter(logging.Formatter):
    """Formats a record as a single JSON line for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "source": f"{record.module}:{record.funcName}:{record.lineno}",
        }

        context = {"request_id": request_id_var.get(), "user_id": user_id_var.get()}
        entry.update({key: value for key, value in context.items() if value})

        entity_type = getattr(record, _ENTITY_TYPE, None)
        if entity_type:
            entry["entity"] = {"type": entity_type, "id": getattr(record, _ENTITY_ID, None)}

        data = getattr(record, _DATA, None)
        if data:
            entry["data"] = data

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    """Development format; appends [request_id] when one is set."""

    def __init__(self):
        super().__init__('%(asctime)s %(levelname)-7s %(name)s: %(message)s')

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        request_id = request_id_var.get()
        return f"{line} [{request_id}]" if request_id else line


class StructuredLogger(logging.LoggerAdapter):
    """Adds entity context and free-form data to module loggers."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return msg, kwargs

    def log_with_context(
        self,
        level: int,
        msg: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        **extra_data
    ):
        extra: Dict[str, Any] = {}
        if entity_type:
            extra[_ENTITY_TYPE] = entity_type
            extra[_ENTITY_ID] = entity_id
        if extra_data:
            extra[_DATA] = extra_data
        self.log(level, msg, extra=extra)

    def bulk_result(self, operation: str, entity_type: str, entity_id: str, succeeded: int, failed: int, **extra_data):
        """Outcome of a partial-success batch; WARNING when any entry failed."""
        self.log_with_context(
            logging.WARNING if failed else logging.INFO,
            f"{operation}: {succeeded} ok, {failed} failed",
            entity_type=entity_type,
            entity_id=entity_id,
            succeeded=succeeded,
            failed=failed,
            **extra_data
        )


def setup_logging(level: str = "INFO", json_format: bool = True) -> None:
    """
    Route the root, package and uvicorn loggers to stdout.

    Args:
        level: DEBUG, INFO, WARNING or ERROR
        json_format: JSON lines (production) or ConsoleFormatter
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        logging.getLogger(name).handlers = [handler]

    # SQL echo only when explicitly asked for
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name), {})


def set_request_context(request_id: str, user_id: Optional[str] = None):
    request_id_var.set(request_id)
    if user_id:
        user_id_var.set(user_id)


def clear_request_context():
    request_id_var.set('')
    user_id_var.set('')
