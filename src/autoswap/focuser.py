# =============================================================================
# Window Focus
# =============================================================================

from __future__ import annotations

from loguru import logger

from autoswap.platform_probe import PlatformKind
from autoswap.strategies import SessionStrategy


class WindowFocuser:
    """
    Bring the window or pane behind a handle to the front.

    Best-effort: failures are logged and reported as False, never raised. The
    handle must come from the strategy registered for the same PlatformKind.
    """

    def __init__(self, strategies: dict[PlatformKind, SessionStrategy]):
        self.strategies = strategies

    def focus(self, handle: str, kind: PlatformKind) -> bool:
        if not handle:
            return False

        strategy = self.strategies.get(kind)
        if strategy is None or not strategy.owns(handle):
            logger.warning(
                "Refusing to focus a handle from another platform",
                operation="focus",
                status="invalid_handle",
                platform=kind.value,
                handle=handle,
            )
            return False

        try:
            focused = strategy.focus(handle)
        except (Exception, SystemExit):
            logger.exception(
                "Window focus failed",
                operation="focus",
                status="error",
                platform=kind.value,
                handle=handle,
            )
            return False

        log_level = "info" if focused else "warning"
        getattr(logger, log_level)(
            "Window focused" if focused else "Window focus failed",
            operation="focus",
            status="success" if focused else "failed",
            platform=kind.value,
            handle=handle,
        )
        return focused
