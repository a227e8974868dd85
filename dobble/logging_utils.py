import json
import logging
import os
import sys
import typing as _t
from contextvars import ContextVar
from typing import Any, Dict, Optional

# Context var to carry a request id through the request lifecycle
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# extra fields copied from log records into structured output
EXTRA_FIELDS = (
    "path",
    "method",
    "status",
    "duration_ms",
    "client",
    "user_agent",
    "url",
    "order",
    "seed",
    "date",
    "deck_id",
    "cards",
    "evicted",
    "errors",
    "error",
)

# fields shown inline by the pretty formatter after the message
_DOMAIN_FIELDS = ("order", "seed", "date", "deck_id", "cards", "evicted", "error")

# 2xx green, 3xx cyan, 4xx yellow, anything else red
_STATUS_COLORS = {2: "\033[32m", 3: "\033[36m", 4: "\033[33m"}


class JsonFormatter(logging.Formatter):
    """JSON log formatter for service logs and log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "logger": record.name,
            "message": record.getMessage(),
        }
        rid = request_id_ctx.get()
        if rid:
            payload["request_id"] = rid
        for key in EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                payload[key] = val
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ColorFormatter(logging.Formatter):
    """Human-friendly, colorized formatter that uses structured fields when present."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    COLORS = {
        "DEBUG": "\033[36m",   # cyan
        "INFO": "\033[32m",    # green
        "WARNING": "\033[33m", # yellow
        "ERROR": "\033[31m",   # red
        "CRITICAL": "\033[35m",# magenta
    }

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def _color(self, text: str, color: str) -> str:
        if not self.use_color:
            return text
        return f"{color}{text}{self.RESET}"

    def _status_str(self, status: Optional[int]) -> Optional[str]:
        if not isinstance(status, int):
            return None
        color = _STATUS_COLORS.get(status // 100, "\033[31m")
        return self._color(str(status), color)

    def _request_line(self, record: logging.LogRecord) -> Optional[str]:
        method = getattr(record, "method", None)
        path = getattr(record, "path", None)
        status_str = self._status_str(getattr(record, "status", None))
        duration_ms = getattr(record, "duration_ms", None)
        parts: _t.List[str] = []
        if method:
            parts.append(self._color(method, self.BOLD))
        if path:
            parts.append(self._color(path, "\033[36m"))
        if status_str:
            parts.append(status_str)
        if duration_ms is not None:
            parts.append(self._color(f"{duration_ms}ms", "\033[90m"))
        return " ".join(parts) if parts else None

    def _fields_str(self, record: logging.LogRecord) -> Optional[str]:
        fields = [
            f"{key}={getattr(record, key)}"
            for key in _DOMAIN_FIELDS
            if getattr(record, key, None) is not None
        ]
        client = getattr(record, "client", None)
        if client:
            fields.append(f"client={client}")
        return "[" + " ".join(fields) + "]" if fields else None

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        parts: _t.List[str] = [
            self._color(level, self.COLORS.get(level, "")),
            self.formatTime(record, datefmt="%H:%M:%S"),
        ]
        rid = request_id_ctx.get()
        if rid:
            parts.append(self._color(f"rid={rid}", "\033[35m"))
        parts.append(self._color(record.name, "\033[34m"))

        req_line = self._request_line(record)
        if req_line:
            parts.append(req_line)

        msg = record.getMessage()
        if msg:
            parts.extend(["-", msg])

        fields = self._fields_str(record)
        if fields:
            parts.append(self._color(fields, "\033[90m"))

        if record.exc_info:
            parts.append("\n" + self.formatException(record.exc_info))
        return " ".join(parts)


def _isatty(stream) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def build_formatter() -> logging.Formatter:
    """Pick the log format from LOG_FORMAT / LOG_COLOR and the TTY.

    LOG_FORMAT=pretty or json forces a format; unset means pretty on a TTY,
    JSON otherwise. LOG_COLOR=0 turns off ANSI colors in pretty mode.
    """
    fmt_env = os.getenv("LOG_FORMAT", "").lower()
    use_pretty = fmt_env == "pretty" or (fmt_env == "" and _isatty(sys.stdout))
    if not use_pretty:
        return JsonFormatter()
    color_env = os.getenv("LOG_COLOR", "1").lower()
    return ColorFormatter(use_color=color_env not in ("0", "false", "no"))


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Install one stdout handler on the root logger.

    uvicorn's loggers propagate to it. uvicorn.access is disabled;
    RequestLoggingMiddleware logs each request instead.
    """
    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter())
    root.addHandler(handler)

    uvicorn = logging.getLogger("uvicorn")
    uvicorn.handlers = []
    uvicorn.propagate = True
    logging.getLogger("uvicorn.access").disabled = True
    return root


def get_logger(name: str = "dobble") -> logging.Logger:
    return logging.getLogger(name)
