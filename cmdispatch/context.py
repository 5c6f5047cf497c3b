"""Per-call context handed through to command handlers.

The dispatcher never looks inside a Context. It exists so that callers (the
HTTP adapter, a CLI runner) can pass cancellation, a deadline and request
scoped values down to handlers that ask for them by declaring a first
parameter annotated ``Context`` or named ``ctx``.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any


class Context:
    def __init__(
        self,
        deadline: float | None = None,
        values: Mapping[str, Any] | None = None,
        _cancelled: threading.Event | None = None,
    ) -> None:
        self.deadline = deadline
        self._values = MappingProxyType(dict(values or {}))
        self._cancelled = _cancelled or threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def with_value(self, key: str, value: Any) -> Context:
        """Return a child context sharing cancellation, with one extra value."""
        return Context(
            deadline=self.deadline,
            values={**self._values, key: value},
            _cancelled=self._cancelled,
        )

    def with_timeout(self, seconds: float) -> Context:
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return Context(deadline=deadline, values=self._values, _cancelled=self._cancelled)

    def value(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __repr__(self) -> str:
        return f"Context(deadline={self.deadline!r}, values={list(self._values)!r}, cancelled={self.cancelled})"


def background() -> Context:
    """A fresh context with no deadline and no values."""
    return Context()
