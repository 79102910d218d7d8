"""Opik SDK client helpers."""
from __future__ import annotations

import logging
from threading import Lock
from typing import Optional

from app.core.config import settings

try:
    from opik import Opik
except ImportError:  # pragma: no cover
    Opik = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

_lock = Lock()
_client: Optional["Opik"] = None
_resolved = False


def init_opik() -> Optional["Opik"]:
    """Build the Opik client on first use; later calls return the cached result."""
    global _client, _resolved

    with _lock:
        if _resolved:
            return _client
        _resolved = True
        _client = _build_client()
        return _client


def get_opik_client() -> Optional["Opik"]:
    if _resolved:
        return _client
    return init_opik()


def reset_opik() -> None:
    """Forget the cached client so settings changes take effect (used by tests)."""
    global _client, _resolved
    with _lock:
        _client = None
        _resolved = False


def _build_client() -> Optional["Opik"]:
    if Opik is None or not settings.opik_enabled:
        return None
    if not settings.opik_api_key:
        logger.warning("OPIK_ENABLED is set without OPIK_API_KEY; generation traces are disabled.")
        return None
    try:
        client = Opik(project_name=settings.opik_project, api_key=settings.opik_api_key)
    except Exception as exc:  # pragma: no cover - defensive
        logger.warning("Opik initialization failed, continuing without traces: %s", exc)
        return None
    logger.info("Opik tracing enabled for project %s", settings.opik_project)
    return client
