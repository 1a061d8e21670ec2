# =============================================================================
# Swap File Event Handling
# =============================================================================

from __future__ import annotations

import os
import time
from enum import Enum
from uuid import uuid4

from loguru import logger

from autoswap.config_loader import AutoswapConfig
from autoswap.focuser import WindowFocuser
from autoswap.host import EditorHost
from autoswap.locator import ActiveSessionLocator
from autoswap.logging_config import trace_id_var
from autoswap.notifications import NotificationScheduler
from autoswap.platform_probe import PlatformKind

MSG_SWITCHED = "Switched to existing session in another window"
MSG_DELETED = "Old swapfile detected... and deleted"
MSG_READ_ONLY = "Swapfile detected, opening read-only"


class OutcomeDirective(Enum):
    SWITCH_AWAY = "switch_away"
    DISCARD_AND_EDIT = "discard_and_edit"
    OPEN_READ_ONLY = "open_read_only"

    @property
    def swapchoice(self) -> str:
        """The v:swapchoice letter Vim expects for this outcome."""
        return _SWAPCHOICE[self]


_SWAPCHOICE = {
    OutcomeDirective.SWITCH_AWAY: "q",
    OutcomeDirective.DISCARD_AND_EDIT: "e",
    OutcomeDirective.OPEN_READ_ONLY: "o",
}


def mtime(path: str) -> float:
    """Modification time of path, -1 when it cannot be read."""
    try:
        return os.stat(path).st_mtime
    except OSError:
        return -1.0


class SwapfileEventHandler:
    """
    Decide what the editor does with a file whose swap file already exists.

    1. Another session holds it: focus that window, quit this open.
    2. Swap file strictly older than the file: delete it, edit normally.
    3. Anything else (newer, same age, unreadable): open read-only.
    """

    def __init__(
        self,
        config: AutoswapConfig,
        host: EditorHost,
        locator: ActiveSessionLocator | None = None,
        focuser: WindowFocuser | None = None,
        scheduler: NotificationScheduler | None = None,
    ):
        self.config = config
        self.locator = locator or ActiveSessionLocator(config)
        self.focuser = focuser or WindowFocuser(self.locator.strategies)
        self.scheduler = scheduler or NotificationScheduler(host)

    def handle(self, file_path: str, swap_path: str) -> OutcomeDirective:
        trace_id = str(uuid4())
        token = trace_id_var.set(trace_id)
        start_time = time.perf_counter()

        logger.info(
            "Swap file detected",
            operation="handle",
            status="started",
            trace_id=trace_id,
            file_path=file_path,
            swap_path=swap_path,
        )

        try:
            directive = self._decide(file_path, swap_path)
        finally:
            trace_id_var.reset(token)

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Swap file handled",
            operation="handle",
            status="complete",
            trace_id=trace_id,
            directive=directive.value,
            metrics={"duration_ms": duration_ms},
        )
        return directive

    def _decide(self, file_path: str, swap_path: str) -> OutcomeDirective:
        kind = self._probe()
        handle = self._locate(file_path, swap_path, kind)

        if handle:
            self.scheduler.enqueue(MSG_SWITCHED)
            self._focus(handle, kind)
            return OutcomeDirective.SWITCH_AWAY

        # Ties stay read-only: a swap file that is not provably stale may be live
        if mtime(swap_path) < mtime(file_path):
            try:
                os.remove(swap_path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(
                    "Could not delete stale swap file",
                    operation="handle",
                    status="delete_failed",
                    swap_path=swap_path,
                    error=str(e),
                )
                self.scheduler.enqueue(MSG_READ_ONLY)
                return OutcomeDirective.OPEN_READ_ONLY
            self.scheduler.enqueue(MSG_DELETED)
            return OutcomeDirective.DISCARD_AND_EDIT

        self.scheduler.enqueue(MSG_READ_ONLY)
        return OutcomeDirective.OPEN_READ_ONLY

    def _probe(self) -> PlatformKind:
        try:
            return self.locator.probe()
        except (Exception, SystemExit):
            logger.exception("Platform detection failed", operation="handle", status="error")
            return PlatformKind.UNSUPPORTED

    # SystemExit included: third-party window APIs call sys.exit() on failure
    def _locate(self, file_path: str, swap_path: str, kind: PlatformKind) -> str:
        try:
            return self.locator.locate(file_path, swap_path, kind)
        except (Exception, SystemExit):
            logger.exception("Active session lookup failed", operation="handle", status="error")
            return ""

    def _focus(self, handle: str, kind: PlatformKind) -> None:
        try:
            self.focuser.focus(handle, kind)
        except (Exception, SystemExit):
            logger.exception("Window focus failed", operation="handle", status="error")
