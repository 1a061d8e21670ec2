"""
autoswap - stop fighting over swap files.

When the editor finds a swap file for the file being opened, autoswap looks for
the terminal window (or tmux pane) where another session already has it open
and brings it to the front. With no live session, a stale swap file is deleted
and a fresh one is opened read-only.
"""

from loguru import logger

from autoswap.handler import OutcomeDirective, SwapfileEventHandler
from autoswap.platform_probe import PlatformKind, detect_platform

__version__ = "1.0.0"

# Library default: silent until an entry point calls setup_logger()
logger.disable("autoswap")

__all__ = [
    "OutcomeDirective",
    "PlatformKind",
    "SwapfileEventHandler",
    "detect_platform",
    "__version__",
]
