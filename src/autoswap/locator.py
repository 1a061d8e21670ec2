# =============================================================================
# Active Session Lookup
# =============================================================================

from __future__ import annotations

import time

from loguru import logger

from autoswap.config_loader import AutoswapConfig
from autoswap.platform_probe import PlatformKind, detect_platform
from autoswap.strategies import SessionStrategy, build_strategies


class ActiveSessionLocator:
    """
    Find the terminal window or tmux pane of the session holding a swap file.

    Exactly one strategy runs per call. "" means not found, whether nothing
    holds the file, the environment is unsupported, or a tool failed.
    """

    def __init__(
        self,
        config: AutoswapConfig,
        strategies: dict[PlatformKind, SessionStrategy] | None = None,
    ):
        self.config = config
        self.strategies = build_strategies(config) if strategies is None else strategies

    def probe(self) -> PlatformKind:
        return detect_platform(self.config.detect_tmux)

    def locate(self, file_path: str, swap_path: str, kind: PlatformKind | None = None) -> str:
        if kind is None:
            kind = self.probe()
        strategy = self.strategies.get(kind)
        if strategy is None:
            return ""

        start_time = time.perf_counter()
        try:
            handle = strategy.locate(file_path, swap_path)
        except (Exception, SystemExit):
            logger.exception(
                "Window lookup failed",
                operation="locate",
                status="error",
                platform=kind.value,
            )
            return ""
        duration_ms = int((time.perf_counter() - start_time) * 1000)

        if handle and not strategy.owns(handle):
            logger.warning(
                "Discarding handle in a foreign format",
                operation="locate",
                status="invalid_handle",
                platform=kind.value,
                handle=handle,
            )
            handle = ""

        logger.info(
            "Active session lookup complete",
            operation="locate",
            status="found" if handle else "not_found",
            platform=kind.value,
            strategy=strategy.name,
            handle=handle or None,
            metrics={"duration_ms": duration_ms},
        )
        return handle
