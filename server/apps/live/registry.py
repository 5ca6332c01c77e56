"""Registry of connected live update clients."""

import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Final, final
from uuid import UUID

from server.apps.live.events import EventKind
from server.apps.live.transport import Transport

logger = logging.getLogger(__name__)

# Subscription ID length in bytes (generates 16 hex chars)
_SUBSCRIPTION_ID_BYTES: Final = 8


@dataclass(frozen=True, slots=True)
class Subscription:
    """One connected client and the folder it listens to.

    ``folder_scope`` None means the client watches the root, which
    receives every event.
    """

    subscription_id: str
    transport: Transport
    folder_scope: str | None


@final
class SubscriptionRegistry:
    """Thread-safe map of subscription ID to subscription.

    The registry is the only holder of the client transports. Entries
    have no ordering between them.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._subscriptions: dict[str, Subscription] = {}
        self._lock = threading.Lock()

    def subscribe(
        self,
        transport: Transport,
        folder_scope: UUID | str | None = None,
    ) -> str:
        """Register a client and send it the handshake event.

        The handshake is written before the entry becomes visible, so it
        is always the first event the client sees.

        Args:
            transport: Client transport.
            folder_scope: Folder the client watches, None for the root.

        Returns:
            New subscription ID.

        Raises:
            TransportClosedError: If the handshake cannot be written.
        """
        subscription_id = 'client_{token}'.format(
            token=secrets.token_hex(_SUBSCRIPTION_ID_BYTES),
        )
        scope = str(folder_scope) if folder_scope is not None else None

        transport.send(EventKind.CONNECTED, {'clientId': subscription_id})

        with self._lock:
            self._subscriptions[subscription_id] = Subscription(
                subscription_id=subscription_id,
                transport=transport,
                folder_scope=scope,
            )

        logger.info(
            'Client connected: %s (folder: %s)',
            subscription_id,
            scope or 'root',
        )
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a client. Safe to call more than once.

        Args:
            subscription_id: Subscription to remove.

        Returns:
            True if the subscription was registered, False otherwise.
        """
        with self._lock:
            removed = self._subscriptions.pop(subscription_id, None)

        if removed is None:
            return False

        removed.transport.close()
        logger.info('Client disconnected: %s', subscription_id)
        return True

    def snapshot(self) -> list[Subscription]:
        """Copy of the current subscriptions, safe to iterate."""
        with self._lock:
            return list(self._subscriptions.values())

    def count(self) -> int:
        """Number of connected clients."""
        with self._lock:
            return len(self._subscriptions)

    def __contains__(self, subscription_id: object) -> bool:
        """Check whether a subscription is registered."""
        with self._lock:
            return subscription_id in self._subscriptions
