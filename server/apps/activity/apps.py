"""Django app configuration for activity app."""

from typing import override

from django.apps import AppConfig

from server.apps.activity.client import ActivityLogClient


class ActivityConfig(AppConfig):
    """Configuration for activity app.

    Holds the process-wide activity log client used by the receivers.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.activity'
    label = 'activity'
    verbose_name = 'Activity log'

    client: ActivityLogClient

    @override
    def ready(self) -> None:
        """Create the client and connect the activity receivers."""
        self.client = ActivityLogClient.from_settings()

        from server.apps.activity import receivers  # noqa: F401, PLC0415
