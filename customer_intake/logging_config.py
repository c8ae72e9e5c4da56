import json
import logging
import logging.config
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

operation_id_ctx_var: ContextVar[str] = ContextVar("operation_id", default="-")

# attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "operation_id"}


def get_operation_id() -> str:
    """Return the operation id from the contextvar for logging."""

    return operation_id_ctx_var.get()


@contextmanager
def operation_scope(name: str) -> Iterator[str]:
    """Run a block under a fresh operation id so its log lines can be correlated."""

    operation_id = f"{name}-{uuid.uuid4().hex[:12]}"
    token = operation_id_ctx_var.set(operation_id)
    try:
        yield operation_id
    finally:
        operation_id_ctx_var.reset(token)


class OperationIdFilter(logging.Filter):
    """Inject the operation id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.operation_id = get_operation_id()
        return True


class JsonFormatter(logging.Formatter):
    """Structured log formatter that renders records as JSON."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt) if record.created else None,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "operation_id": getattr(record, "operation_id", None),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_record[key] = value
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            log_record["stack_info"] = record.stack_info
        return json.dumps({k: v for k, v in log_record.items() if v is not None}, default=str)


def configure_logging(level: str = "INFO") -> None:
    """Configure structured logging for the intake client."""

    level = level.upper()
    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "operation_id": {"()": "customer_intake.logging_config.OperationIdFilter"},
        },
        "formatters": {
            "json": {
                "()": "customer_intake.logging_config.JsonFormatter",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "filters": ["operation_id"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "customer_intake": {"handlers": ["default"], "level": level, "propagate": False},
            "httpx": {"handlers": ["default"], "level": "WARNING", "propagate": False},
        },
    }
    logging.config.dictConfig(logging_config)
