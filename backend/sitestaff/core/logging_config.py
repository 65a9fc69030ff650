"""
Logging setup for the SiteStaff backend.

Production writes one JSON object per line; development gets a short
colored console line. Request ids and per-task context (employee, actor)
live in context variables so concurrent requests never mix their fields.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sitestaff.core.config import settings

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

# Fields lifted to the top level of JSON records when present
PROMOTED_FIELDS = ("request_id", "employee_id", "actor_id", "user_id", "action", "operational_incident")

_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def current_request_id() -> Optional[str]:
    return _request_id.get()


class ContextFilter(logging.Filter):
    """Copies the request id and bound context onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = _request_id.get()
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    def __init__(self, service_name: str = "sitestaff-backend"):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "service": self.service_name,
            "env": settings.ENVIRONMENT,
        }
        for key in PROMOTED_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in PROMOTED_FIELDS
        }
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["error"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "detail": self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        stamp = time.strftime("%H:%M:%S", time.localtime(record.created))
        tags = " ".join(
            f"{key}={getattr(record, key)}"
            for key in ("request_id", "employee_id")
            if getattr(record, key, None)
        )
        line = f"{color}{stamp} {record.levelname:<7}{self.RESET} {record.name}: {record.getMessage()}"
        if tags:
            line += f" [{tags}]"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class ContextLogger:
    """
    Thin wrapper over a stdlib logger whose bound context is added to
    every record it emits (for example employee_id during a bulk job).
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    @property
    def context(self) -> Dict[str, Any]:
        return dict(_log_context.get())

    def set_context(self, **kwargs) -> None:
        _log_context.set({**_log_context.get(), **kwargs})

    def clear_context(self) -> None:
        _log_context.set({})

    def log(self, level: int, msg: str, *args, **kwargs) -> None:
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs) -> None:
        kwargs.setdefault("exc_info", True)
        self.log(logging.ERROR, msg, *args, **kwargs)


def setup_logging(
    service_name: str = "sitestaff-backend",
    log_level: Optional[str] = None,
    json_logs: Optional[bool] = None,
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        service_name: Value of the `service` field in JSON records
        log_level: Override of the level derived from DEBUG
        json_logs: Override of the format derived from ENVIRONMENT
    """
    level = (log_level or ("DEBUG" if settings.DEBUG else "INFO")).upper()
    use_json = settings.IS_PRODUCTION if json_logs is None else json_logs

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JSONFormatter(service_name) if use_json else ConsoleFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger("sitestaff.logging").debug(
        f"Logging ready: level={level} json={use_json} env={settings.ENVIRONMENT}"
    )


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name))


class RequestLoggingMiddleware:
    """
    ASGI middleware: assigns a request id (or reuses X-Request-ID), echoes
    it in the response headers and logs one line per request.
    """

    def __init__(self, app, header_name: str = "x-request-id"):
        self.app = app
        self.header_name = header_name
        self.logger = logging.getLogger("sitestaff.http")

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        incoming = dict(scope.get("headers") or []).get(self.header_name.encode())
        request_id = incoming.decode("latin-1") if incoming else uuid.uuid4().hex[:12]
        token = _request_id.set(request_id)
        scope.setdefault("state", {})["request_id"] = request_id

        started = time.perf_counter()
        status_code = 500

        async def send_with_request_id(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = list(message.get("headers", []))
                headers.append((self.header_name.encode(), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            path = scope.get("path", "/")
            if path != "/health":
                elapsed_ms = (time.perf_counter() - started) * 1000
                self.logger.log(
                    logging.WARNING if status_code >= 400 else logging.INFO,
                    f"{scope.get('method', '-')} {path} -> {status_code} in {elapsed_ms:.1f}ms",
                    extra={"status": status_code, "duration_ms": round(elapsed_ms, 1)},
                )
            _request_id.reset(token)
