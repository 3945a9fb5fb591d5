# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging across prober components
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging

Provides structured, JSON-formatted logging for the database prober.

Features:
- Component-based loggers
- Contextual fields (target_name, db_family, operation)
- JSON output for log aggregation

The context stack lives in a ContextVar, so every asyncio task (one per
probe target) sees only the context it pushed itself.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("prober.executor")

    with log_context(target_name="orders-primary", db_family="mysql"):
        logger.info("Probe succeeded", extra={"duration": 0.004})
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union
from enum import Enum


class ComponentType(str, Enum):
    """Component types for logging categorization."""
    PROBER = "prober"
    DRIVER = "driver"
    METRICS = "metrics"
    CONFIG = "config"
    API = "api"
    HEALTH = "health"


@dataclass
class LogContext:
    """
    Context for structured logging.

    Task-local storage for contextual fields.
    """
    target_name: Optional[str] = None
    db_family: Optional[str] = None
    component: Optional[str] = None
    operation: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


# Immutable stack so that copies taken by asyncio tasks never share mutations
_context_stack: ContextVar[Tuple[LogContext, ...]] = ContextVar(
    "db_probe_log_context", default=()
)


def get_current_context() -> LogContext:
    """Get current logging context."""
    stack = _context_stack.get()
    if stack:
        return stack[-1]
    return LogContext()


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding logging context.

    Args:
        **kwargs: Context fields to add

    Example:
        with log_context(target_name="orders-primary", operation="probe"):
            logger.info("Probing")
    """
    # Merge with parent context
    parent = get_current_context()
    new_context = LogContext(
        target_name=kwargs.get("target_name", parent.target_name),
        db_family=kwargs.get("db_family", parent.db_family),
        component=kwargs.get("component", parent.component),
        operation=kwargs.get("operation", parent.operation),
        extra={**parent.extra, **kwargs.get("extra", {})},
    )

    token = _context_stack.set(_context_stack.get() + (new_context,))
    try:
        yield new_context
    finally:
        _context_stack.reset(token)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregators.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_context: bool = True,
        include_source: bool = True,
    ):
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_context = include_context
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {}

        if self.include_timestamp:
            log_data["timestamp"] = _utcnow().isoformat().replace("+00:00", "Z")

        if self.include_level:
            log_data["level"] = record.levelname

        if self.include_logger:
            log_data["logger"] = record.name

        # Message
        log_data["message"] = record.getMessage()

        # Include context
        if self.include_context:
            context_dict = get_current_context().to_dict()
            if context_dict:
                log_data["context"] = context_dict

        # Include extra fields from record
        if hasattr(record, "extra") and record.extra:
            log_data["data"] = record.extra

        # Include exception info
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Source location
        if self.include_source:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter for development.

    Includes context fields inline for easy reading.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for human reading."""
        # Base format
        timestamp = _utcnow().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        # Get context
        context = get_current_context()
        context_parts = []
        if context.target_name:
            context_parts.append(f"target={context.target_name}")
        if context.db_family:
            context_parts.append(f"type={context.db_family}")
        if context.operation:
            context_parts.append(f"op={context.operation}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        # Message
        message = record.getMessage()

        # Extra data, minus fields already shown as context
        extra_str = ""
        if hasattr(record, "extra") and record.extra:
            shown = {"target_name", "db_family", "operation", "component"}
            data = {k: v for k, v in record.extra.items() if k not in shown}
            if data:
                extra_str = f" {data}"

        # Format
        result = f"{timestamp} {level} {record.name}{context_str}: {message}{extra_str}"

        # Exception
        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in log records.

    Automatically includes the task-local context in all log messages.
    """

    def process(self, msg, kwargs):
        """Process log record to include context."""
        # Get current context
        context = get_current_context()

        # Merge extra fields
        extra = dict(kwargs.get("extra") or {})
        for key, value in context.to_dict().items():
            extra.setdefault(key, value)
        if self.extra.get("component") is not None:
            extra.setdefault("component", ComponentType(self.extra["component"]).value)

        # Store as attribute for formatter access
        kwargs["extra"] = {"extra": extra}

        return msg, kwargs


def get_logger(
    name: str,
    component: Optional[ComponentType] = None,
) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "prober.loop")
        component: Optional component type for categorization

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    adapter = ContextLogger(base_logger, {"component": component})
    return adapter


def configure_logging(
    level: Union[str, int, None] = None,
    json_output: bool = False,
    include_source: bool = True,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR); defaults to LOG_LEVEL or INFO
        json_output: Use JSON format (also enabled by LOG_FORMAT=json)
        include_source: Include source file/line info
    """
    # Determine level
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    # Choose formatter
    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter(
            include_context=True,
            include_source=include_source,
        )
    else:
        formatter = HumanFormatter()

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    # Add stream handler
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ComponentType",
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
]
