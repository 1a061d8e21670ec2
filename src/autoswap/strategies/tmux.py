# =============================================================================
# tmux Pane Lookup
# =============================================================================
# swap file -> pid holding it open -> controlling tty -> tmux pane on that tty

from __future__ import annotations

import os
import re

from loguru import logger

from autoswap.errors import ErrorType
from autoswap.strategies.base import SessionStrategy

PANE_FORMAT = "#{pane_tty} #{window_index} #{pane_index}"

# ps prints "?" (Linux) or "??" (macOS) for processes without a terminal
_NO_TTY = {"", "?", "??", "-"}


def normalize_tty(tty: str) -> str:
    """Turn ps output ("pts/3", "ttys003") into a device path."""
    tty = tty.strip()
    if tty in _NO_TTY:
        return ""
    return tty if tty.startswith("/") else f"/dev/{tty}"


class TmuxStrategy(SessionStrategy):
    name = "tmux"
    # "<pane_tty> <window_index> <pane_index>"
    handle_pattern = re.compile(r"/\S+ \d+ \d+")

    def __init__(self, *args, own_pid: int | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.own_pid = os.getpid() if own_pid is None else own_pid

    def holder_pids(self, swap_path: str) -> list[int]:
        """Pids of processes holding the swap file open, own process excluded."""
        result = self.run(["lsof", "-t", swap_path], "holder_pids")
        if result.is_err() and result.error.error_type == ErrorType.TOOL_NOT_FOUND:
            # fuser prints "path:" on stderr and the pids on stdout
            result = self.run(["fuser", swap_path], "holder_pids")
        if result.is_err():
            return []

        pids = []
        for token in re.findall(r"\d+", result.value):
            pid = int(token)
            if pid != self.own_pid and pid not in pids:
                pids.append(pid)
        return pids

    def tty_of(self, pid: int) -> str:
        result = self.run(["ps", "-o", "tty=", "-p", str(pid)], "tty_of")
        if result.is_err():
            return ""
        lines = result.value.strip().splitlines()
        return normalize_tty(lines[0]) if lines else ""

    def list_panes(self) -> list[tuple[str, str, str]]:
        """(pane_tty, window_index, pane_index) for every pane of the server."""
        result = self.run(["tmux", "list-panes", "-a", "-F", PANE_FORMAT], "list_panes")
        if result.is_err():
            return []

        panes = []
        for line in result.value.splitlines():
            parts = line.split()
            if len(parts) != 3 or not parts[1].isdigit() or not parts[2].isdigit():
                logger.debug(
                    "Skipping malformed pane line",
                    operation="list_panes",
                    status="parse_error",
                    line_preview=line[:100],
                )
                continue
            panes.append((parts[0], parts[1], parts[2]))
        return panes

    def locate(self, file_path: str, swap_path: str) -> str:
        pids = self.holder_pids(swap_path)
        if not pids:
            logger.debug(
                "No process holds the swap file",
                operation="tmux_locate",
                status="not_found",
                swap_path=swap_path,
            )
            return ""

        ttys = [tty for tty in (self.tty_of(pid) for pid in pids) if tty]
        if not ttys:
            logger.debug(
                "Swap file holder has no controlling terminal",
                operation="tmux_locate",
                status="not_found",
                pids=pids,
            )
            return ""

        for pane_tty, window_index, pane_index in self.list_panes():
            if pane_tty in ttys:
                handle = f"{pane_tty} {window_index} {pane_index}"
                logger.debug(
                    "Found tmux pane",
                    operation="tmux_locate",
                    status="success",
                    handle=handle,
                )
                return handle

        logger.debug(
            "No tmux pane on the holder's terminal",
            operation="tmux_locate",
            status="not_found",
            ttys=ttys,
        )
        return ""

    def focus(self, handle: str) -> bool:
        _, window_index, pane_index = handle.split()
        window = self.run(["tmux", "select-window", "-t", window_index], "tmux_focus")
        if window.is_err():
            return False
        pane = self.run(["tmux", "select-pane", "-t", pane_index], "tmux_focus")
        return pane.is_ok()
