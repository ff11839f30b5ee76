"""
Structured logging configuration for the Gaming Dashboard backend.

Uses Python's built-in logging with a JSONFormatter: structured JSON output
for production log shippers, while every module keeps the plain
logging.getLogger(__name__) pattern.

Environments:
- production: JSON to stdout (machine-readable)
- development/staging/test: Colored text to stderr (human-readable)

Usage:
    from gaming_dashboard.observability.logging_config import configure_logging

    configure_logging()  # auto-detects from DASHBOARD_ENV

    logger = logging.getLogger(__name__)
    logger.info("agent_run_finished", extra={"products": 12})

Agent runs bind their name and a run id on the current asyncio context
(see bind_run_context), so every record emitted during a run carries them.
"""

from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional

# ─── Run Context ──────────────────────────────────────────────────────

_agent_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "dashboard_agent", default=None
)
_run_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "dashboard_run_id", default=None
)


def bind_run_context(agent: str, run_id: str) -> tuple[contextvars.Token, contextvars.Token]:
    """
    Bind the agent name and run id to the current context.

    Returns the tokens needed by reset_run_context(). Each asyncio task
    has its own context copy, so concurrent runs never see each other's ids.
    """
    return _agent_var.set(agent), _run_id_var.set(run_id)


def reset_run_context(tokens: tuple[contextvars.Token, contextvars.Token]) -> None:
    """Restore the context that was active before bind_run_context()."""
    agent_token, run_token = tokens
    _run_id_var.reset(run_token)
    _agent_var.reset(agent_token)


def get_run_context() -> dict[str, str]:
    """Return the bound agent/run_id, omitting unset keys."""
    context: dict[str, str] = {}
    agent = _agent_var.get()
    run_id = _run_id_var.get()
    if agent:
        context["agent"] = agent
    if run_id:
        context["run_id"] = run_id
    return context


# ─── Context Filter ───────────────────────────────────────────────────


class ContextFilter(logging.Filter):
    """Injects the bound agent and run_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in get_run_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


# ─── JSON Formatter (Production) ──────────────────────────────────────


# Attributes every LogRecord carries; anything else came in via extra=
_STANDARD_FIELDS = frozenset({
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message",
    "taskName",
})


class JSONFormatter(logging.Formatter):
    """
    Outputs log records as single-line JSON objects.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "gaming_dashboard.agents.base",
         "message": "agent_run_finished", "agent": "content", "run_id": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _STANDARD_FIELDS or key.startswith("_"):
                continue
            try:
                json.dumps(value)
                entry[key] = value
            except (TypeError, ValueError):
                entry[key] = str(value)

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


# ─── Dev Formatter (Local Development) ────────────────────────────────


class DevFormatter(logging.Formatter):
    """
    Colorful, human-readable logs for local development.

    Format: [HH:MM:SS] LEVEL logger: message [key=value key=value]
    """

    COLORS = {
        logging.DEBUG: "\033[36m",     # Cyan
        logging.INFO: "\033[32m",      # Green
        logging.WARNING: "\033[33m",   # Yellow
        logging.ERROR: "\033[31m",     # Red
        logging.CRITICAL: "\033[41m",  # Red background
    }
    RESET = "\033[0m"

    # Known extra fields to display inline
    _EXTRA_KEYS = (
        "agent", "run_id", "provider", "status", "duration_ms",
        "error", "service",
    )

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, self.RESET)
        timestamp = self.formatTime(record, "%H:%M:%S")

        extras = []
        for key in self._EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                extras.append(f"{key}={value}")

        extra_str = f" [{' '.join(extras)}]" if extras else ""

        formatted = (
            f"{self.RESET}[{timestamp}] "
            f"{color}{record.levelname:<8}{self.RESET} "
            f"{record.name}: {record.getMessage()}{extra_str}"
        )

        if record.exc_info and record.exc_info[1]:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


# ─── Configuration ────────────────────────────────────────────────────


def configure_logging(
    env: Optional[str] = None,
    level: int | str = logging.INFO,
) -> None:
    """
    Configure the root logger based on environment.

    Args:
        env: Override environment. If None, reads from DASHBOARD_ENV
             (defaults to "development").
        level: Log level (default: INFO). Accepts names like "DEBUG".

    Behavior:
        - production → JSONFormatter to stdout
        - everything else → DevFormatter to stderr
    """
    env = (env or os.environ.get("DASHBOARD_ENV", "development")).lower().strip()
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if env == "production":
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(DevFormatter())

    handler.addFilter(ContextFilter())
    root_logger.addHandler(handler)

    # Silence noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)
