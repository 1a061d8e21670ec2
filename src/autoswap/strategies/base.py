# =============================================================================
# Window Lookup Strategy Base
# =============================================================================

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterable
from typing import ClassVar

from autoswap.commands import DEFAULT_TIMEOUT, run_command
from autoswap.errors import Result

CommandRunner = Callable[..., Result[str]]


def title_matches(title: str, file_path: str, editor_markers: Iterable[str]) -> bool:
    """True when a window title names the file and an editor marker."""
    lowered = title.lower()
    basename = os.path.basename(file_path).lower()
    return bool(basename) and basename in lowered and any(
        marker.lower() in lowered for marker in editor_markers
    )


class SessionStrategy:
    """
    One platform's way of finding and focusing the window that holds a file.

    locate() returns an opaque handle ("" when nothing is found) and focus()
    accepts only handles this same strategy produced (see owns()).
    """

    name: ClassVar[str] = "base"
    handle_pattern: ClassVar[re.Pattern[str]] = re.compile(r"(?!)")

    def __init__(
        self,
        runner: CommandRunner = run_command,
        timeout: float = DEFAULT_TIMEOUT,
        editor_markers: Iterable[str] = ("vim",),
    ):
        self.runner = runner
        self.timeout = timeout
        self.editor_markers = tuple(m.lower() for m in editor_markers)

    @classmethod
    def from_config(cls, config, runner: CommandRunner = run_command) -> "SessionStrategy":
        return cls(runner=runner, timeout=config.command_timeout, editor_markers=config.editor_markers)

    def owns(self, handle: str) -> bool:
        return bool(handle) and self.handle_pattern.fullmatch(handle) is not None

    def locate(self, file_path: str, swap_path: str) -> str:
        raise NotImplementedError

    def focus(self, handle: str) -> bool:
        raise NotImplementedError

    def run(self, args: list[str], operation: str) -> Result[str]:
        return self.runner(args, timeout=self.timeout, operation=operation)

    def title_matches(self, title: str, file_path: str) -> bool:
        return title_matches(title, file_path, self.editor_markers)


class UnsupportedStrategy(SessionStrategy):
    """Environments with no window lookup: always "not found"."""

    name = "unsupported"

    def locate(self, file_path: str, swap_path: str) -> str:
        return ""

    def focus(self, handle: str) -> bool:
        return False
