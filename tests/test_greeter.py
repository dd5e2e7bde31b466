from __future__ import annotations

import logging
from unittest.mock import Mock

import pytest

from doubles import CallRecorder
from services.greeter import Greeter, greet


def test_greet_calls_callback_once(callback):
    greet("Alice", callback)

    callback.assert_called_once()
    assert callback.calls[0].args == ()


def test_callback_not_called_without_greeting(callback):
    Greeter(callback)

    callback.assert_not_called()
    assert callback.call_count == 0


def test_greeter_calls_injected_callback_per_greeting(callback):
    greeter = Greeter(callback)

    assert greeter.greet("Alice") == "Hello, Alice!"
    greeter.greet("Bob")

    callback.assert_called_times(2)


def test_greet_logs_before_calling_back(caplog):
    events = []

    def _on_greeted():
        events.append([r.getMessage() for r in caplog.records])

    with caplog.at_level(logging.INFO, logger="services.greeter"):
        greet("Alice", CallRecorder(_on_greeted))

    assert events == [["Greeted Alice"]]


def test_greet_with_unittest_mock():
    callback = Mock()

    greet("Alice", callback)

    callback.assert_called_once_with()


def test_callback_errors_propagate():
    callback = CallRecorder(Mock(side_effect=RuntimeError("boom")))

    with pytest.raises(RuntimeError, match="boom"):
        greet("Alice", callback)
    callback.assert_called_once()
