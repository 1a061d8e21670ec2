# =============================================================================
# Deferred Status Messages
# =============================================================================
# The swap-exists event fires before the editor has shown the buffer, so a
# message echoed right away would be wiped. The message waits for the next
# buffer-enter event instead.

from __future__ import annotations

from collections.abc import Hashable

from loguru import logger

from autoswap.host import EditorHost


class NotificationScheduler:
    """Single-slot, one-shot message queue keyed on the next buffer enter."""

    def __init__(self, host: EditorHost):
        self.host = host
        self.pending: str | None = None
        self._listener: Hashable | None = None

    def enqueue(self, message: str) -> None:
        # A newer message overwrites one that has not fired yet
        self.pending = message
        if self._listener is None:
            self._listener = self.host.add_buffer_enter_listener(self.fire)
        logger.debug(
            "Notification queued",
            operation="enqueue",
            status="pending",
            notification=message,
        )

    def fire(self) -> None:
        message, self.pending = self.pending, None
        listener, self._listener = self._listener, None
        if listener is not None:
            self.host.remove_listener(listener)
        if message is None:
            return
        self.host.echo(message)
