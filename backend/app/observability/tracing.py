"""Trace spans around API requests, generation runs and LLM calls."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from app.core.context import get_request_id
from app.observability.client import get_tracing_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def _trace_metadata(
    metadata: Optional[Dict[str, Any]],
    user_id: Optional[str],
    request_id: Optional[str],
) -> Optional[Dict[str, Any]]:
    merged = dict(metadata or {})
    if user_id:
        merged.setdefault("user_id", str(user_id))
    # Scheduler runs bind "daily-generation-<date>" here, HTTP requests their header id.
    correlation_id = request_id or get_request_id()
    if correlation_id:
        merged.setdefault("request_id", correlation_id)
    return merged or None


def _start(name: str, metadata: Optional[Dict[str, Any]]) -> Optional["Trace"]:
    client = get_tracing_client()
    if client is None:
        return None
    try:
        return client.trace(name=name, metadata=metadata)
    except Exception as exc:  # pragma: no cover - exporter failure
        logger.debug("Could not open trace %s: %s", name, exc)
        return None


def _finish(span: "Trace", name: str, error: Optional[BaseException] = None) -> None:
    try:
        if error is not None:
            span.update(error_info={"message": str(error)})
        span.end()
    except Exception:  # pragma: no cover - exporter failure
        logger.debug("Could not close trace %s", name, exc_info=True)


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    user_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """Wrap a block in an Opik trace; a no-op when tracing is off.

    Exceptions are attached to the trace and re-raised unchanged.
    """
    span = _start(name, _trace_metadata(metadata, user_id, request_id))
    if span is None:
        yield None
        return

    try:
        yield span
    except Exception as exc:
        _finish(span, name, exc)
        raise
    _finish(span, name)
