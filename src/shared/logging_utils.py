import logging
from contextvars import ContextVar
from typing import Any, Dict, Optional


_LOGGER = logging.getLogger("blog")
_TRACE_ID: ContextVar[Optional[str]] = ContextVar("blog_trace_id", default=None)


def bind_trace_id(trace_id: Optional[str]) -> None:
    """Attach a trace id to the current invocation context."""
    _TRACE_ID.set(trace_id)


def current_trace_id() -> Optional[str]:
    return _TRACE_ID.get()


def log(level: int, trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    dims: Dict[str, Any] = {"traceId": trace_id} if trace_id else {}
    dims.update(dimensions)
    try:
        _LOGGER.log(level, message, extra={"custom_dimensions": dims})
    except Exception:
        # Fallback if extra/custom_dimensions not supported in the environment
        _LOGGER.log(level, f"{message} | {dims}")


def debug(trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.DEBUG, trace_id, message, **dimensions)


def info(trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.INFO, trace_id, message, **dimensions)


def warning(trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.WARNING, trace_id, message, **dimensions)


def error(trace_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.ERROR, trace_id, message, **dimensions)
