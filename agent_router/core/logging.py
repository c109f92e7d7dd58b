"""Structured logging configuration for the agent router"""

import logging
import sys
import json
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import contextvars

# Correlation ids for the current task
request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'request_id', default=None
)
agent_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'agent_id', default=None
)


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def __init__(self, service_name: str = "agent-router"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a single JSON line"""
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        agent_id = agent_id_var.get()
        if agent_id:
            log_data["agent_id"] = agent_id

        if hasattr(record, 'extra_fields'):
            log_data.update(record.extra_fields)

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        if record.levelno >= logging.WARNING:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName
            }

        return json.dumps(log_data, default=str)


class StructuredLogger:
    """Wrapper around a stdlib logger that accepts keyword fields"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self._context: Dict[str, Any] = {}

    def bind(self, **kwargs) -> 'StructuredLogger':
        """Create a new logger carrying additional fields"""
        new_logger = StructuredLogger(self.logger.name)
        new_logger.logger = self.logger
        new_logger._context = {**self._context, **kwargs}
        return new_logger

    def _log(self, level: int, message: str, **kwargs):
        extra_fields = {**self._context, **kwargs}
        self.logger.log(level, message, extra={'extra_fields': extra_fields})

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs):
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log at ERROR level with the active exception's traceback"""
        extra_fields = {**self._context, **kwargs}
        self.logger.exception(message, extra={'extra_fields': extra_fields})


def setup_logging(
    level: str = "INFO",
    json_output: bool = True,
    service_name: str = "agent-router"
) -> None:
    """
    Configure logging for the process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, emit JSON lines. If False, use a human-readable format
        service_name: Name reported in the "service" field of every record
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if json_output:
        formatter = StructuredFormatter(service_name=service_name)
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Quiet chatty client libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger (typically for __name__)"""
    return StructuredLogger(name)


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def clear_request_id() -> None:
    request_id_var.set(None)


def set_agent_id(agent_id: str) -> contextvars.Token:
    """Tag subsequent records in this task with an agent id"""
    return agent_id_var.set(agent_id)


def reset_agent_id(token: contextvars.Token) -> None:
    agent_id_var.reset(token)
