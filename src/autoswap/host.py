# =============================================================================
# Editor Host Boundary
# =============================================================================

from __future__ import annotations

import itertools
import sys
from collections.abc import Callable, Hashable
from typing import Protocol, TextIO


class EditorHost(Protocol):
    """What autoswap needs from the editor besides the swap-exists event."""

    def echo(self, message: str) -> None:
        """Write a message to the status/echo area."""

    def add_buffer_enter_listener(self, callback: Callable[[], None]) -> Hashable:
        """Call callback on the next buffer enter; returns a removal token."""

    def remove_listener(self, token: Hashable) -> None:
        """Deregister a listener; unknown tokens are ignored."""


class ConsoleHost:
    """Host for the command line: messages go to a stream, buffers are simulated."""

    def __init__(self, stream: TextIO | None = None, prefix: str = "autoswap: "):
        self.stream = stream
        self.prefix = prefix
        self._listeners: dict[int, Callable[[], None]] = {}
        self._tokens = itertools.count(1)

    def echo(self, message: str) -> None:
        stream = self.stream or sys.stderr
        stream.write(f"{self.prefix}{message}\n")
        stream.flush()

    def add_buffer_enter_listener(self, callback: Callable[[], None]) -> int:
        token = next(self._tokens)
        self._listeners[token] = callback
        return token

    def remove_listener(self, token: Hashable) -> None:
        self._listeners.pop(token, None)

    def enter_buffer(self) -> None:
        """Fire every listener registered so far, as a buffer enter would."""
        for callback in list(self._listeners.values()):
            callback()
