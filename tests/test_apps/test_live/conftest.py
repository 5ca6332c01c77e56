"""Shared fixtures for live updates app tests."""

import pytest
from django.apps import apps

from server.apps.live.dispatcher import BroadcastDispatcher
from server.apps.live.exceptions import TransportClosedError
from server.apps.live.registry import SubscriptionRegistry


class RecordingTransport:
    """Transport that keeps every event it is sent."""

    def __init__(self, fail=False):
        self.events = []
        self.closed = False
        self.fail = fail

    def send(self, event, data):
        if self.closed or self.fail:
            raise TransportClosedError('gone')
        self.events.append((event, data))

    def close(self):
        self.closed = True

    def names(self):
        return [event for event, _ in self.events]


@pytest.fixture
def make_transport():
    """Factory for recording transports.

    Returns:
        RecordingTransport class.
    """
    return RecordingTransport


@pytest.fixture
def registry():
    """Fresh, empty subscription registry.

    Returns:
        SubscriptionRegistry instance.
    """
    return SubscriptionRegistry()


@pytest.fixture
def dispatcher(registry):
    """Dispatcher publishing to the registry fixture.

    Returns:
        BroadcastDispatcher instance.
    """
    return BroadcastDispatcher(registry)


@pytest.fixture
def live_registry():
    """Registry owned by the live app, emptied after the test.

    Yields:
        The app's SubscriptionRegistry.
    """
    app_registry = apps.get_app_config('live').registry
    yield app_registry
    for subscription in app_registry.snapshot():
        app_registry.unsubscribe(subscription.subscription_id)


@pytest.fixture
def local_storage(settings, tmp_path):
    """Store uploads in a temporary directory.

    Returns:
        Directory holding the stored files.
    """
    settings.MEDIA_ROOT = str(tmp_path)
    settings.STORAGES = {
        'default': {
            'BACKEND': (
                'server.apps.files.infrastructure.storage.LocalFileStorage'
            ),
        },
        'staticfiles': {
            'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
        },
    }
    return tmp_path
