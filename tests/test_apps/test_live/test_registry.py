"""Tests for the subscription registry."""

import threading
import uuid

import pytest

from server.apps.live.exceptions import TransportClosedError


def test_subscribe_sends_handshake(registry, make_transport):
    """Test the first event a client sees is the connected handshake."""
    transport = make_transport()

    subscription_id = registry.subscribe(transport)

    assert transport.events == [
        ('connected', {'clientId': subscription_id}),
    ]
    assert subscription_id in registry


def test_subscribe_stores_scope_as_string(registry, make_transport):
    """Test UUID scopes are normalized to their string form."""
    folder_id = uuid.uuid4()

    registry.subscribe(make_transport(), folder_id)

    (subscription,) = registry.snapshot()
    assert subscription.folder_scope == str(folder_id)


def test_subscription_ids_are_unique(registry, make_transport):
    """Test every subscription gets its own ID."""
    ids = {registry.subscribe(make_transport()) for _ in range(20)}

    assert len(ids) == 20
    assert registry.count() == 20


def test_failed_handshake_is_not_registered(registry, make_transport):
    """Test a transport that cannot take the handshake is not added."""
    with pytest.raises(TransportClosedError):
        registry.subscribe(make_transport(fail=True))

    assert registry.count() == 0


def test_unsubscribe_closes_transport(registry, make_transport):
    """Test unsubscribing removes the entry and closes its transport."""
    transport = make_transport()
    subscription_id = registry.subscribe(transport)

    assert registry.unsubscribe(subscription_id)

    assert transport.closed
    assert subscription_id not in registry


def test_unsubscribe_is_idempotent(registry, make_transport):
    """Test removing an unknown or removed subscription is a no-op."""
    subscription_id = registry.subscribe(make_transport())
    registry.unsubscribe(subscription_id)

    assert not registry.unsubscribe(subscription_id)
    assert not registry.unsubscribe('client_unknown')


def test_snapshot_is_a_copy(registry, make_transport):
    """Test mutating the registry does not affect a taken snapshot."""
    subscription_id = registry.subscribe(make_transport())
    snapshot = registry.snapshot()

    registry.unsubscribe(subscription_id)

    assert len(snapshot) == 1
    assert registry.snapshot() == []


def test_concurrent_subscribe_and_unsubscribe(registry, make_transport):
    """Test parallel clients leave the registry consistent."""

    def connect_and_leave():  # noqa: WPS430
        for _ in range(50):
            registry.unsubscribe(registry.subscribe(make_transport()))

    threads = [threading.Thread(target=connect_and_leave) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert registry.count() == 0
