# =============================================================================
# macOS Terminal App Window Lookup
# =============================================================================
# Terminal.app is scripted through osascript; iTerm2 through its Python API,
# driven from a child process (autoswap.iterm_bridge). Both match windows by
# title: Vim's 'title' option puts the file name and "VIM" there.

from __future__ import annotations

import os
import re
import sys
from collections.abc import Mapping

from loguru import logger

from autoswap.commands import find_tool, run_command
from autoswap.errors import Result
from autoswap.platform_probe import mac_terminal_app
from autoswap.strategies.base import CommandRunner, SessionStrategy

APPLE_TERMINAL = "Apple_Terminal"
ITERM_TIMEOUT = 2.0
ITERM_BRIDGE = "autoswap.iterm_bridge"


def applescript_string(value: str) -> str:
    """Quote a Python string as an AppleScript string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def python_executable() -> str:
    """
    Interpreter for the iTerm2 bridge.

    Inside Vim sys.executable can be Vim itself, so fall back to the
    interpreter of the same installation, then to python3 on PATH.
    """
    if os.path.basename(sys.executable).startswith("python"):
        return sys.executable
    version = f"python{sys.version_info.major}.{sys.version_info.minor}"
    candidate = os.path.join(sys.exec_prefix, "bin", version)
    if os.path.exists(candidate):
        return candidate
    return find_tool("python3") or "python3"


def bridge_environment() -> dict[str, str]:
    # The child imports autoswap and iterm2 from wherever this process does
    return {"PYTHONPATH": os.pathsep.join(p for p in sys.path if p)}


class TerminalAppStrategy(SessionStrategy):
    name = "terminal_app"
    # "<TERM_PROGRAM>:<window id>"
    handle_pattern = re.compile(r"Apple_Terminal:\d+|iTerm\.app:\S+")

    def __init__(
        self,
        *args,
        environ: Mapping[str, str] | None = None,
        iterm_timeout: float = ITERM_TIMEOUT,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        self.environ = environ
        self.iterm_timeout = iterm_timeout

    @classmethod
    def from_config(cls, config, runner: CommandRunner = run_command) -> "TerminalAppStrategy":
        return cls(
            runner=runner,
            timeout=config.command_timeout,
            editor_markers=config.editor_markers,
            iterm_timeout=config.iterm_timeout,
        )

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def locate(self, file_path: str, swap_path: str) -> str:
        terminal = mac_terminal_app(self.environ)
        if terminal is None:
            environ = os.environ if self.environ is None else self.environ
            logger.warning(
                "Unsupported terminal - cannot look for the active session",
                operation="terminal_app_locate",
                status="unsupported",
                term_program=environ.get("TERM_PROGRAM"),
            )
            return ""

        if terminal == APPLE_TERMINAL:
            window_ids = self.apple_terminal_window_ids(file_path)
        else:
            window_ids = self.iterm_window_ids(file_path)

        if not window_ids:
            return ""
        if len(window_ids) > 1:
            # Listing order is not chronological; last is only a best guess
            logger.debug(
                "Several windows match, taking the last",
                operation="terminal_app_locate",
                status="ambiguous",
                window_ids=window_ids,
            )
        return f"{terminal}:{window_ids[-1]}"

    def apple_terminal_window_ids(self, file_path: str) -> list[str]:
        basename = os.path.basename(file_path)
        markers = " or ".join(
            f"name contains {applescript_string(m)}" for m in self.editor_markers
        )
        script = (
            'if application "Terminal" is running then\n'
            '    tell application "Terminal" to get id of every window whose '
            f"name contains {applescript_string(basename)} and ({markers})\n"
            "end if"
        )
        result = self.run(["osascript", "-e", script], "apple_terminal_locate")
        if result.is_err():
            return []
        # osascript prints the list as "1234, 5678"
        return [wid for wid in re.split(r"[,\s]+", result.value.strip()) if wid.isdigit()]

    def iterm_window_ids(self, file_path: str) -> list[str]:
        args = ["windows", file_path]
        for marker in self.editor_markers:
            args += ["--marker", marker]
        result = self.run_iterm_bridge(args, "iterm_locate")
        if result.is_err():
            return []
        return [line.strip() for line in result.value.splitlines() if line.strip()]

    # -------------------------------------------------------------------------
    # Focus
    # -------------------------------------------------------------------------

    def focus(self, handle: str) -> bool:
        terminal, window_id = handle.split(":", 1)
        if terminal == APPLE_TERMINAL:
            script = (
                'tell application "Terminal"\n'
                f"    set index of window id {window_id} to 1\n"
                "    activate\n"
                "end tell"
            )
            return self.run(["osascript", "-e", script], "apple_terminal_focus").is_ok()
        return self.focus_iterm(window_id)

    def focus_iterm(self, window_id: str) -> bool:
        return self.run_iterm_bridge(["activate", window_id], "iterm_focus").is_ok()

    def run_iterm_bridge(self, args: list[str], operation: str) -> Result[str]:
        """
        Run one iTerm2 API exchange in a child interpreter.

        Connecting, authenticating (which may wait on iTerm2's permission
        prompt) and the RPCs are all bounded by iterm_timeout. A timeout,
        refused connection or missing window comes back as a Result error.
        """
        command = [python_executable(), "-m", ITERM_BRIDGE, *args]
        result = self.runner(
            command,
            timeout=self.iterm_timeout,
            operation=operation,
            env=bridge_environment(),
        )
        if result.is_err():
            logger.debug(
                "iTerm2 API exchange failed",
                operation=operation,
                status=result.error.error_type.value,
                error=result.error.message,
            )
        return result
