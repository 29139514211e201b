"""
BrandColor Structured Logging
Configures the loguru sink once and attaches context dicts to records.
"""
import sys
from typing import Dict, Any, Optional

from loguru import logger

from app.config import config

_configured = False


def _configure_sink():
    """Replace loguru's default handler with the service sink."""
    global _configured
    if _configured:
        return

    logger.remove()
    logger.add(
        sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function} | {message} | {extra}",
        level=config.LOG_LEVEL,
        serialize=config.LOG_JSON
    )
    _configured = True


class StructuredLogger:
    """Thin wrapper over loguru that binds per-call ``extra`` context."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        _configure_sink()
        self._context = dict(context or {})

    def bind(self, **context) -> "StructuredLogger":
        """Child logger that adds ``context`` to every record."""
        return StructuredLogger({**self._context, **context})

    def _emit(self, level: str, message: str, extra: Optional[Dict[str, Any]]):
        fields = {**self._context, **(extra or {})}
        # depth=2 attributes the record to the caller, not this wrapper
        bound = logger.bind(**fields) if fields else logger
        bound.opt(depth=2).log(level, message)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("DEBUG", message, extra)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._emit("ERROR", message, extra)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
