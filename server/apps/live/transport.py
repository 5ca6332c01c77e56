"""Server-sent event transport for live update clients.

Each connected client owns one transport: a bounded queue that
broadcasts write into and the client's streaming response drains.
"""

import contextlib
import json
import logging
import queue
import threading
from collections.abc import Iterator
from typing import Any, Final, Protocol, final

from django.core.serializers.json import DjangoJSONEncoder

from server.apps.live.exceptions import TransportClosedError

logger = logging.getLogger(__name__)

# Comment line that keeps idle connections (and proxies) alive
HEARTBEAT_FRAME: Final = ': heartbeat\n\n'


class Transport(Protocol):
    """Write-only, ordered event sink with a close signal."""

    def send(self, event: str, data: Any) -> None:
        """Write one event, raising TransportClosedError on failure."""

    def close(self) -> None:
        """Stop accepting events."""


def format_event(event: str, data: Any) -> str:
    """Render one server-sent event frame.

    Args:
        event: Event name (e.g. 'file:added').
        data: JSON-serializable payload (UUIDs and datetimes allowed).

    Returns:
        Frame text, e.g. 'event: file:added\\ndata: {...}\\n\\n'.
    """
    payload = json.dumps(data, cls=DjangoJSONEncoder)
    return f'event: {event}\ndata: {payload}\n\n'


@final
class EventStreamTransport:
    """Queue-backed transport drained by a streaming HTTP response.

    A client that lets its queue fill up is treated as gone: the
    transport closes itself and further sends fail.
    """

    def __init__(self, queue_size: int, heartbeat_seconds: float) -> None:
        """Initialize transport.

        Args:
            queue_size: Events buffered before the client counts as dead.
            heartbeat_seconds: Idle time before a heartbeat is emitted.
        """
        self._queue: queue.Queue[str | None] = queue.Queue(maxsize=queue_size)
        self._heartbeat_seconds = heartbeat_seconds
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        """Whether the transport stopped accepting events."""
        return self._closed.is_set()

    def send(self, event: str, data: Any) -> None:
        """Queue one event for the client.

        Args:
            event: Event name.
            data: JSON-serializable payload.

        Raises:
            TransportClosedError: If the transport is closed or the
                client is not draining its queue.
        """
        if self.closed:
            raise TransportClosedError('Transport is closed')

        try:
            self._queue.put_nowait(format_event(event, data))
        except queue.Full as error:
            self.close()
            raise TransportClosedError(
                'Client is not keeping up with events',
            ) from error

    def close(self) -> None:
        """Close the transport and wake up a waiting stream."""
        if self.closed:
            return
        self._closed.set()
        # A full queue still ends the stream: frames() checks the flag
        with contextlib.suppress(queue.Full):
            self._queue.put_nowait(None)

    def frames(self) -> Iterator[str]:
        """Yield frames until the transport is closed.

        Events queued before the close are still delivered.

        Yields:
            Event frames, or a heartbeat comment after an idle period.
        """
        while True:
            try:
                frame = self._queue.get(timeout=self._heartbeat_seconds)
            except queue.Empty:
                if self.closed:
                    break
                yield HEARTBEAT_FRAME
                continue

            if frame is None:
                break
            yield frame

        logger.debug('Event stream finished')
