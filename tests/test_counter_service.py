from __future__ import annotations

import logging
from unittest.mock import Mock

import pytest

from persistence.preferences import KeyValueStore, Preferences
from services.counter import COUNTER_KEY, CounterService


@pytest.fixture
def service(preferences) -> CounterService:
    return CounterService(preferences)


def test_counter_defaults_to_zero(service):
    assert service.get_counter() == 0


def test_counter_reads_seeded_value():
    service = CounterService(Preferences.in_memory({COUNTER_KEY: 10}))
    assert service.get_counter() == 10


def test_set_counter_writes_through(service, preferences):
    assert service.set_counter(42) is True

    # assert on the double, not through the service
    assert preferences.get_int("counter") == 42


def test_increment_counter(service, preferences):
    assert service.increment_counter() == 1
    assert service.increment_counter() == 2
    assert preferences.get_int("counter") == 2


def test_custom_key(preferences):
    service = CounterService(preferences, key="clicks")
    service.set_counter(3)

    assert preferences.get_int("clicks") == 3
    assert preferences.get_int("counter") is None


def test_counter_works_against_a_mock_store():
    store = Mock(spec=KeyValueStore)
    store.get_int.return_value = None
    store.set_int.return_value = True

    service = CounterService(store)
    assert service.increment_counter() == 1

    store.get_int.assert_called_once_with("counter")
    store.set_int.assert_called_once_with("counter", 1)


def test_store_failures_propagate():
    store = Mock(spec=KeyValueStore)
    store.set_int.side_effect = OSError("disk full")

    with pytest.raises(OSError, match="disk full"):
        CounterService(store).set_counter(1)


def test_increment_reports_unchanged_value_when_write_is_refused(caplog):
    store = Mock(spec=KeyValueStore)
    store.get_int.return_value = 4
    store.set_int.return_value = False

    with caplog.at_level(logging.WARNING, logger="services.counter"):
        assert CounterService(store).increment_counter() == 4

    store.set_int.assert_called_once_with("counter", 5)
    assert "refused" in caplog.text
