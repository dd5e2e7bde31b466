from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

Callback = Callable[[], object]


def greet(name: str, callback: Callback) -> str:
    """Log a greeting for `name`, then call `callback` exactly once."""
    message = f"Hello, {name}!"
    logger.info("Greeted %s", name)
    callback()
    return message


class Greeter:
    """Same as greet(), with the callback injected once at construction."""

    def __init__(self, on_greeted: Callback) -> None:
        self._on_greeted = on_greeted

    def greet(self, name: str) -> str:
        return greet(name, self._on_greeted)
