"""
Structured Logging Utilities

Loggers that carry request context (user, job, application) on every line.
"""

from __future__ import annotations

import logging
from typing import Any


def format_context(context: dict[str, Any]) -> str:
    """Render context as ``key=value`` pairs, skipping empty values."""
    return " | ".join(f"{key}={value}" for key, value in context.items() if value is not None)


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that prefixes messages with structured context.

    Usage:
        logger = get_structured_logger(__name__, user_id=7, job_id=42)
        logger.info("Application submitted")
        # -> "[user_id=7 | job_id=42] Application submitted"
    """

    def __init__(self, logger: logging.Logger, **context: Any):
        super().__init__(logger, context)

    def bind(self, **context: Any) -> StructuredLoggerAdapter:
        """Return a new adapter with extra context merged in."""
        return StructuredLoggerAdapter(self.logger, **{**self.extra, **context})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context_str = format_context(self.extra)
        if context_str:
            msg = f"[{context_str}] {msg}"
        return msg, kwargs


def get_structured_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    """
    Get a structured logger with context.

    Args:
        name: Logger name (typically __name__)
        **context: Context fields (e.g., user_id=7, job_id=42)

    Returns:
        StructuredLoggerAdapter instance
    """
    return StructuredLoggerAdapter(logging.getLogger(name), **context)
