import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

ROOT_LOGGER = "safetrip"

# Set by the HTTP middleware for the duration of a request
current_request_id: ContextVar[Optional[str]] = ContextVar("current_request_id", default=None)

# LogRecord attributes that are not user context
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line: the fixed fields below plus whatever scalar
    context was passed through `extra=`.
    """

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._format_record(record), default=str)

    def _format_record(self, record: logging.LogRecord) -> Dict[str, Any]:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key in payload or key.startswith("_"):
                continue
            if isinstance(value, (str, int, float, bool, type(None))):
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return payload


class RequestIDFilter(logging.Filter):
    """Stamp records with the id of the request being served, if any."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = current_request_id.get()
        return True


def setup_logging(logger_name: str = ROOT_LOGGER, log_level: str = "INFO") -> logging.Logger:
    """
    Send the application's logs to stdout as JSON lines.

    Args:
        logger_name: Name of the logger to configure
        log_level: Logging level name

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIDFilter())

    # Repeated setup (reloads, tests) must not duplicate output
    logger.handlers = [handler]
    logger.propagate = False

    return logger


def get_logger(
        module_name: str,
        request_id: Optional[str] = None,
        user_id: Optional[str] = None
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Child of the application logger, with optional fixed context.

    Args:
        module_name: Name of the module (usually __name__)
        request_id: Request the log lines belong to
        user_id: Traveler the log lines belong to

    Returns:
        Logger, or a LoggerAdapter when context is given
    """
    if module_name.startswith(f"{ROOT_LOGGER}."):
        module_name = module_name[len(ROOT_LOGGER) + 1:]
    logger = logging.getLogger(f"{ROOT_LOGGER}.{module_name}")

    extra = {}
    if request_id:
        extra["request_id"] = request_id
    if user_id:
        extra["user_id"] = user_id

    if extra:
        return logging.LoggerAdapter(logger, extra)
    return logger
