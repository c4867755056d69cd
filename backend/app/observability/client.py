"""Process-wide Opik client for exporting request and generation traces."""
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

_client: Optional["Opik"] = None
_resolved = False
_lock = Lock()


def tracing_disabled_reason() -> Optional[str]:
    """Why traces would not be exported with the current settings, or None."""
    if Opik is None:
        return "sdk_not_installed"
    if not settings.opik_enabled:
        return "disabled"
    if not settings.opik_api_key:
        return "missing_api_key"
    return None


def _create_client() -> Optional["Opik"]:
    reason = tracing_disabled_reason()
    if reason == "missing_api_key":
        logger.warning("OPIK_ENABLED is set without OPIK_API_KEY; generation traces stay local.")
        return None
    if reason is not None:
        logger.debug("Opik tracing off (%s).", reason)
        return None

    try:
        client = Opik(project_name=settings.opik_project, api_key=settings.opik_api_key)
    except Exception as exc:
        logger.warning("Opik client could not be created, tracing disabled: %s", exc)
        return None

    logger.info("Exporting traces to Opik project %s.", settings.opik_project)
    return client


def get_tracing_client() -> Optional["Opik"]:
    """Return the shared Opik client, creating it on first use.

    The outcome is remembered either way so a misconfigured deployment logs its
    warning once instead of on every request or scheduler run.
    """
    global _client, _resolved

    if _resolved:
        return _client
    with _lock:
        if not _resolved:
            _client = _create_client()
            _resolved = True
    return _client


def reset_tracing_client() -> None:
    """Drop the cached client so the next lookup re-reads settings."""
    global _client, _resolved
    with _lock:
        _client = None
        _resolved = False
