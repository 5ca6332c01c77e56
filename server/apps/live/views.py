"""HTTP endpoint that streams live update events."""

import logging
from collections.abc import Iterator
from typing import final
from uuid import UUID

from django.apps import apps
from django.conf import settings
from django.http import (
    HttpRequest,
    HttpResponseBadRequest,
    StreamingHttpResponse,
)
from django.views.decorators.http import require_GET

from server.apps.live.registry import SubscriptionRegistry
from server.apps.live.transport import EventStreamTransport

logger = logging.getLogger(__name__)


@final
class _SubscriptionStream:
    """Response body that unsubscribes when the response is closed.

    The WSGI server closes the response when the client goes away, and
    StreamingHttpResponse forwards that to ``close`` here.
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        subscription_id: str,
        transport: EventStreamTransport,
    ) -> None:
        self._registry = registry
        self._subscription_id = subscription_id
        self._transport = transport

    def __iter__(self) -> Iterator[str]:
        return self._transport.frames()

    def close(self) -> None:
        self._registry.unsubscribe(self._subscription_id)
        self._transport.close()


def _parse_folder_scope(raw_folder_id: str | None) -> str | None:
    """Canonical form of the folderId parameter, None for the root.

    Raises:
        ValueError: If the value is not a folder ID.
    """
    if not raw_folder_id:
        return None
    return str(UUID(raw_folder_id))


@require_GET
def event_stream(
    request: HttpRequest,
) -> StreamingHttpResponse | HttpResponseBadRequest:
    """Subscribe the caller to live updates.

    Query parameters:
        folderId: Folder to watch. Omitted or empty watches the root,
            which receives every event. IDs are matched in canonical
            form, so any UUID spelling selects the same folder.

    Args:
        request: Incoming request.

    Returns:
        A never-ending ``text/event-stream`` response, or 400 for a
        malformed folderId.
    """
    raw_folder_id = request.GET.get('folderId')
    try:
        folder_scope = _parse_folder_scope(raw_folder_id)
    except ValueError:
        logger.warning('Rejected event stream for folderId %r', raw_folder_id)
        return HttpResponseBadRequest('Invalid folderId')

    registry: SubscriptionRegistry = apps.get_app_config(
        'live',
    ).registry  # type: ignore[attr-defined]

    transport = EventStreamTransport(
        queue_size=settings.LIVE_UPDATES_QUEUE_SIZE,
        heartbeat_seconds=settings.LIVE_UPDATES_HEARTBEAT_SECONDS,
    )
    subscription_id = registry.subscribe(transport, folder_scope)

    response = StreamingHttpResponse(
        _SubscriptionStream(registry, subscription_id, transport),
        content_type='text/event-stream',
    )
    response['Cache-Control'] = 'no-cache'
    response['X-Accel-Buffering'] = 'no'
    return response
