"""
Minimal structured logger with traceId support.
Emits JSON-like single-line logs: level, event, traceId, entry, and optional fields.
"""
import logging
import json
import os
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from contextvars import ContextVar

LOGGER_NAME = "peptide_chopper"

# Context variable to store traceId per request
trace_id_var: ContextVar[Optional[str]] = ContextVar('trace_id', default=None)

class StructuredFormatter(logging.Formatter):
    """Formatter that emits JSON-like single-line logs."""

    def format(self, record: logging.LogRecord) -> str:
        trace_id = trace_id_var.get() or getattr(record, 'traceId', None)

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "event": getattr(record, 'event', record.name),
            "message": record.getMessage(),
        }

        if trace_id:
            log_entry["traceId"] = trace_id

        # Stage of a chop request (e.g. "validate", "chop", "export")
        if hasattr(record, 'stage'):
            log_entry["stage"] = record.stage

        # Sequence record name only, never the sequence itself
        if hasattr(record, 'entry'):
            log_entry["entry"] = record.entry

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, ensure_ascii=False)

def setup_logger(name: str = LOGGER_NAME, level: str = "INFO") -> logging.Logger:
    """Setup structured logger with JSON formatter."""
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)

    logger.propagate = False

    return logger

# Global logger instance
_logger = None

def get_logger() -> logging.Logger:
    """Get or create the global logger instance."""
    global _logger
    if _logger is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")
        _logger = setup_logger(LOGGER_NAME, log_level)
    return _logger

def set_trace_id(trace_id: str) -> None:
    """Set traceId in context for current request."""
    trace_id_var.set(trace_id)

def get_trace_id() -> Optional[str]:
    """Get traceId from context."""
    return trace_id_var.get()

def log_event(level: str, event: str, message: str, entry: Optional[str] = None, stage: Optional[str] = None, **kwargs) -> None:
    """
    Log a structured event with traceId and optional entry and stage.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        event: Event name (e.g., "chop_complete", "chop_invalid_input")
        message: Log message
        entry: Optional sequence record name (name only, not sequence)
        stage: Optional stage name (e.g., "validate", "chop", "export")
        **kwargs: Additional fields to include in log (must not contain sequence data)
    """
    logger = get_logger()
    log_method = getattr(logger, level.lower(), logger.info)

    extra: Dict[str, Any] = {
        'event': event,
        'extra_fields': kwargs,
    }
    if entry:
        extra['entry'] = entry
    if stage:
        extra['stage'] = stage

    log_method(message, extra=extra)

# Convenience functions
def log_info(event: str, message: str, entry: Optional[str] = None, stage: Optional[str] = None, **kwargs) -> None:
    """Log INFO level event."""
    log_event("INFO", event, message, entry, stage, **kwargs)

def log_warning(event: str, message: str, entry: Optional[str] = None, stage: Optional[str] = None, **kwargs) -> None:
    """Log WARNING level event."""
    log_event("WARNING", event, message, entry, stage, **kwargs)

def log_error(event: str, message: str, entry: Optional[str] = None, stage: Optional[str] = None, **kwargs) -> None:
    """Log ERROR level event."""
    log_event("ERROR", event, message, entry, stage, **kwargs)

def log_debug(event: str, message: str, entry: Optional[str] = None, stage: Optional[str] = None, **kwargs) -> None:
    """Log DEBUG level event."""
    log_event("DEBUG", event, message, entry, stage, **kwargs)
