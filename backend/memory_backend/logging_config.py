"""
Centralized logging configuration.
"""
import json
import logging
import sys
import os

DEV_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Driver and server chatter that drowns out request logs
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "pymongo", "motor")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, safe for messages containing quotes or newlines."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def setup_logging() -> logging.Logger:
    """
    Configure the root logger from ENVIRONMENT and LOG_LEVEL.

    Production writes JSON lines at INFO, development a readable console
    format at DEBUG. Safe to call again; handlers are replaced.
    """
    is_production = os.getenv("ENVIRONMENT", "development") == "production"
    log_level = os.getenv("LOG_LEVEL", "INFO" if is_production else "DEBUG").upper()

    handler = logging.StreamHandler(sys.stdout)
    if is_production:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt=DATE_FORMAT))

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        handlers=[handler],
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: level={log_level}, production={is_production}")

    return logger
