from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable


@dataclass(frozen=True)
class RecordedCall:
    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        parts = [repr(a) for a in self.args] + [f"{k}={v!r}" for k, v in self.kwargs.items()]
        return f"call({', '.join(parts)})"


class CallRecorder:
    """
    Stand-in for a callback: records every call, optionally forwards it.

    Calls `delegate` (if given) and returns its result, otherwise returns
    `return_value`. Nothing else happens, so it can replace any function-shaped
    dependency.
    """

    def __init__(self, delegate: Callable[..., Any] | None = None, *, return_value: Any = None, name: str = "callback"):
        self._delegate = delegate
        self.return_value = return_value
        self.name = name
        self._calls: list[RecordedCall] = []

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        self._calls.append(RecordedCall(args, dict(kwargs)))
        if self._delegate is not None:
            return self._delegate(*args, **kwargs)
        return self.return_value

    @property
    def calls(self) -> list[RecordedCall]:
        return list(self._calls)

    @property
    def call_count(self) -> int:
        return len(self._calls)

    @property
    def called(self) -> bool:
        return bool(self._calls)

    def reset(self) -> None:
        self._calls.clear()

    def assert_called_times(self, expected: int) -> None:
        if self.call_count != expected:
            raise AssertionError(
                f"Expected {self.name} to be called {expected} time(s), "
                f"called {self.call_count} time(s): {self._calls}"
            )

    def assert_called_once(self) -> None:
        self.assert_called_times(1)

    def assert_not_called(self) -> None:
        self.assert_called_times(0)

    def assert_called_with(self, *args: Any, **kwargs: Any) -> None:
        """Check the most recent call's arguments."""
        expected = RecordedCall(args, dict(kwargs))
        if not self._calls:
            raise AssertionError(f"Expected {self.name} to be called with {expected!r}, never called")
        if self._calls[-1] != expected:
            raise AssertionError(f"Expected {self.name} last called with {expected!r}, got {self._calls[-1]!r}")

    def __repr__(self) -> str:
        return f"CallRecorder(name={self.name!r}, call_count={self.call_count})"
