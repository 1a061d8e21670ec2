# =============================================================================
# X11 Window Lookup (wmctrl)
# =============================================================================

from __future__ import annotations

import re

from loguru import logger

from autoswap.strategies.base import SessionStrategy


class WmctrlStrategy(SessionStrategy):
    name = "wmctrl"
    handle_pattern = re.compile(r"0x[0-9a-fA-F]+")

    def list_windows(self) -> list[tuple[str, str]]:
        """(window id, title) pairs from `wmctrl -l`."""
        result = self.run(["wmctrl", "-l"], "list_windows")
        if result.is_err():
            return []

        windows = []
        # "0x03a00004  0 hostname title words..."; title may be missing
        for line in result.value.splitlines():
            parts = line.split(None, 3)
            if len(parts) < 3 or not self.handle_pattern.fullmatch(parts[0]):
                continue
            windows.append((parts[0], parts[3] if len(parts) == 4 else ""))
        return windows

    def locate(self, file_path: str, swap_path: str) -> str:
        matches = [wid for wid, title in self.list_windows() if self.title_matches(title, file_path)]
        if not matches:
            logger.debug(
                "No window title names the file",
                operation="wmctrl_locate",
                status="not_found",
                file_path=file_path,
            )
            return ""
        # Newer windows tend to be listed later; not guaranteed
        return matches[-1]

    def focus(self, handle: str) -> bool:
        return self.run(["wmctrl", "-i", "-a", handle], "wmctrl_focus").is_ok()
