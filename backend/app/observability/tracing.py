"""Tracing and metric helpers wrapping Opik.

Both helpers degrade to no-ops when Opik is disabled, so callers never need to
check whether tracing is configured.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from app.core.context import get_request_id, get_user_id
from app.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def _trace_metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    payload = {key: value for key, value in (metadata or {}).items() if value is not None}
    request_id = get_request_id()
    user_id = get_user_id()
    if request_id:
        payload.setdefault("request_id", request_id)
    if user_id:
        payload.setdefault("user_id", user_id)
    return payload


@contextmanager
def trace(name: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[Optional["Trace"]]:
    """Open an Opik trace for the enclosed block and close it on exit."""
    client = get_opik_client()
    opik_trace: Optional["Trace"] = None
    if client:
        try:
            opik_trace = client.trace(name=name, metadata=_trace_metadata(metadata) or None)
        except Exception as exc:  # pragma: no cover - defensive guard
            logger.debug("Unable to start Opik trace %s: %s", name, exc)

    try:
        yield opik_trace
    except Exception as exc:
        if opik_trace:
            try:
                opik_trace.update(error_info={"message": str(exc)})
            except Exception:  # pragma: no cover
                logger.debug("Failed to attach error info to trace %s", name, exc_info=True)
        raise
    finally:
        if opik_trace:
            try:
                opik_trace.end()
            except Exception:  # pragma: no cover
                logger.debug("Failed to close trace %s", name, exc_info=True)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record a single metric value as a short-lived trace."""
    payload: Dict[str, Any] = {"value": value}
    payload.update(metadata or {})
    with trace(f"metric:{name}", metadata=payload):
        pass
