import json
import logging
import sys
from contextvars import ContextVar

# Id of the API call or background job currently running
operation_id_var: ContextVar[str] = ContextVar("operation_id", default="system")

# Attributes every LogRecord carries; anything else arrived through `extra=`
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime", "operation_id"}

CONSOLE_FORMAT = "%(asctime)s %(levelname)-7s [%(operation_id)s] %(name)s: %(message)s"


class OperationIdFilter(logging.Filter):
    def filter(self, record):
        record.operation_id = operation_id_var.get()
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line; `extra=` fields are merged into it."""

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "file": f"{record.module}.py:{record.lineno}",
            "operation_id": getattr(record, "operation_id", "system"),
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", json_output: bool = True):
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(OperationIdFilter())
    handler.setFormatter(JSONFormatter() if json_output else logging.Formatter(CONSOLE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for noisy in ("sqlalchemy.engine", "aiosqlite", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
