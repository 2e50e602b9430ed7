"""
PostHog product analytics and error reporting.

Harbour reports a handful of events (comments posted, job syncs finished)
and unexpected exceptions. The client is built on first use from
``settings.POSTHOG_API_KEY``; with no key the helpers only log, so local
development and the test suite stay offline.
"""

from typing import Any, Dict, Optional

from django.conf import settings
from loguru import logger
from posthog import Posthog

_client = None


def get_posthog_client() -> Optional[Posthog]:
    global _client

    if _client is None and settings.POSTHOG_API_KEY:
        _client = Posthog(
            project_api_key=settings.POSTHOG_API_KEY,
            host=settings.POSTHOG_HOST,
            on_error=lambda error: logger.warning("PostHog delivery failed: {}", error),
            timeout=5,
            max_retries=2,
        )
        logger.info("PostHog reporting to {}", settings.POSTHOG_HOST)
    return _client


def _site_properties(properties: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {"site": settings.SITE_NAME, **(properties or {})}


def capture_event(event_name: str, distinct_id: str = None, properties: Dict[str, Any] = None):
    """
    Record ``event_name`` for ``distinct_id``.

    Visitors are anonymous, so callers pass something stable but not
    identifying (the comment IP hash) or nothing at all.
    """
    client = get_posthog_client()
    if client is None:
        logger.debug("Event {} {}", event_name, properties or {})
        return

    try:
        client.capture(
            distinct_id=distinct_id or "anonymous",
            event=event_name,
            properties=_site_properties(properties),
        )
    except Exception as e:
        logger.warning("Could not send {} to PostHog: {}", event_name, e)


def capture_exception(exception: Exception, distinct_id: str = None, properties: Dict[str, Any] = None):
    """Report ``exception`` to PostHog. Callers log it themselves."""
    client = get_posthog_client()
    if client is None:
        logger.debug("PostHog off, {} not reported", type(exception).__name__)
        return

    try:
        client.capture_exception(
            exception,
            distinct_id=distinct_id or "anonymous",
            properties=_site_properties(properties),
        )
    except Exception as e:
        logger.warning("Could not send exception to PostHog: {}", e)
