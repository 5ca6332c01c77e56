"""Django app configuration for live updates app."""

from typing import override

from django.apps import AppConfig

from server.apps.live.dispatcher import BroadcastDispatcher
from server.apps.live.registry import SubscriptionRegistry


class LiveConfig(AppConfig):
    """Configuration for live updates app.

    Owns the process-wide subscription registry and the dispatcher that
    publishes to it. Other code reaches them through
    ``apps.get_app_config('live')`` instead of module globals.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.live'
    label = 'live'
    verbose_name = 'Live updates'

    registry: SubscriptionRegistry
    dispatcher: BroadcastDispatcher

    @override
    def ready(self) -> None:
        """Create the registry and connect the broadcast receivers."""
        self.registry = SubscriptionRegistry()
        self.dispatcher = BroadcastDispatcher(self.registry)

        from server.apps.live import receivers  # noqa: F401, PLC0415
