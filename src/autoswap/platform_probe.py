# =============================================================================
# Platform Detection
# =============================================================================

from __future__ import annotations

import os
import platform
from collections.abc import Mapping
from enum import Enum

# TERM_PROGRAM values of the macOS terminal apps we can script
SUPPORTED_MAC_TERMINALS = ("Apple_Terminal", "iTerm.app")


class PlatformKind(Enum):
    MULTIPLEXER = "multiplexer"
    MAC_TERMINAL = "mac_terminal"
    LINUX_WINDOW_MANAGER = "linux_window_manager"
    UNSUPPORTED = "unsupported"


def detect_platform(
    detect_tmux: bool,
    environ: Mapping[str, str] | None = None,
    system: str | None = None,
) -> PlatformKind:
    """
    Pick the window-lookup strategy for the current environment.

    tmux takes priority only when it is both enabled and detected ($TMUX set);
    otherwise the OS family decides. Pure: callers re-run it for every event.
    """
    environ = os.environ if environ is None else environ
    system = platform.system() if system is None else system

    if detect_tmux and environ.get("TMUX"):
        return PlatformKind.MULTIPLEXER
    if system == "Darwin":
        return PlatformKind.MAC_TERMINAL
    if system == "Linux":
        return PlatformKind.LINUX_WINDOW_MANAGER
    return PlatformKind.UNSUPPORTED


def mac_terminal_app(environ: Mapping[str, str] | None = None) -> str | None:
    """Return $TERM_PROGRAM if it names a supported terminal app, else None."""
    environ = os.environ if environ is None else environ
    term_program = environ.get("TERM_PROGRAM", "")
    return term_program if term_program in SUPPORTED_MAC_TERMINALS else None
