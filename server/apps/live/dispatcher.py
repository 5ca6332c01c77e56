"""Fan-out of domain events to live update clients."""

import enum
import logging
from collections.abc import Mapping
from typing import Any, Final, final
from uuid import UUID

from server.apps.live.events import EventKind
from server.apps.live.registry import Subscription, SubscriptionRegistry

logger = logging.getLogger(__name__)


class _Scope(enum.Enum):
    UNSCOPED = 'unscoped'


# Relevant folder of events that concern every client
UNSCOPED: Final = _Scope.UNSCOPED

RelevantFolder = UUID | str | None | _Scope


def subscription_matches(
    folder_scope: str | None,
    relevant_folder_id: str | None | _Scope,
) -> bool:
    """Decide whether a subscription receives an event.

    An event goes to a subscription when the event is unscoped, when the
    subscription watches the event's folder, or when the subscription
    watches the root (root watchers receive every event).

    Args:
        folder_scope: Folder the subscription watches, None for the root.
        relevant_folder_id: Folder the event concerns (None for the root)
            or UNSCOPED.

    Returns:
        True if the event should be delivered.
    """
    return (
        relevant_folder_id is UNSCOPED
        or folder_scope is None
        or folder_scope == relevant_folder_id
    )


@final
class BroadcastDispatcher:
    """Publishes events to the matching subscriptions of a registry.

    Delivery is best effort: a client whose transport fails is removed
    from the registry and the remaining clients still get the event.
    Nothing is ever raised back to the publisher.
    """

    def __init__(self, registry: SubscriptionRegistry) -> None:
        """Initialize dispatcher.

        Args:
            registry: Registry holding the connected clients.
        """
        self._registry = registry

    def publish(
        self,
        event_kind: EventKind,
        payload: Mapping[str, Any],
        relevant_folder_id: RelevantFolder = UNSCOPED,
    ) -> int:
        """Deliver an event to every matching subscription.

        Args:
            event_kind: Event name.
            payload: JSON-serializable event payload.
            relevant_folder_id: Folder the event concerns, None for the
                root, UNSCOPED for all clients.

        Returns:
            Number of subscriptions the event was delivered to.
        """
        target: str | None | _Scope = relevant_folder_id
        if isinstance(relevant_folder_id, UUID):
            target = str(relevant_folder_id)

        delivered = 0
        for subscription in self._registry.snapshot():
            if not subscription_matches(subscription.folder_scope, target):
                continue
            if self._deliver(subscription, event_kind, payload):
                delivered += 1

        logger.debug(
            'Broadcast %s to %d clients (folder: %s)',
            event_kind,
            delivered,
            'all' if target is UNSCOPED else target or 'root',
        )
        return delivered

    def _deliver(
        self,
        subscription: Subscription,
        event_kind: EventKind,
        payload: Mapping[str, Any],
    ) -> bool:
        """Send to one subscription, dropping it on failure."""
        try:
            subscription.transport.send(event_kind, payload)
        except Exception:
            logger.warning(
                'Failed to send %s to client %s, removing it',
                event_kind,
                subscription.subscription_id,
                exc_info=True,
            )
            self._registry.unsubscribe(subscription.subscription_id)
            return False
        return True
