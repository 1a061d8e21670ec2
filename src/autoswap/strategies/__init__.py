"""Per-platform window lookup and focus strategies."""

from __future__ import annotations

from autoswap.commands import run_command
from autoswap.config_loader import AutoswapConfig
from autoswap.platform_probe import PlatformKind
from autoswap.strategies.base import CommandRunner, SessionStrategy, UnsupportedStrategy
from autoswap.strategies.terminal_app import TerminalAppStrategy
from autoswap.strategies.tmux import TmuxStrategy
from autoswap.strategies.wmctrl import WmctrlStrategy

STRATEGY_CLASSES: dict[PlatformKind, type[SessionStrategy]] = {
    PlatformKind.MULTIPLEXER: TmuxStrategy,
    PlatformKind.MAC_TERMINAL: TerminalAppStrategy,
    PlatformKind.LINUX_WINDOW_MANAGER: WmctrlStrategy,
    PlatformKind.UNSUPPORTED: UnsupportedStrategy,
}


def build_strategies(
    config: AutoswapConfig,
    runner: CommandRunner = run_command,
) -> dict[PlatformKind, SessionStrategy]:
    """One strategy instance per PlatformKind, sharing a runner and timeouts."""
    return {kind: cls.from_config(config, runner) for kind, cls in STRATEGY_CLASSES.items()}


__all__ = [
    "STRATEGY_CLASSES",
    "SessionStrategy",
    "TerminalAppStrategy",
    "TmuxStrategy",
    "UnsupportedStrategy",
    "WmctrlStrategy",
    "build_strategies",
]
