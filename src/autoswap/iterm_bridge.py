# =============================================================================
# iTerm2 Python API Bridge (child process)
# =============================================================================
# Run as `python -m autoswap.iterm_bridge ...` by the terminal app strategy.
# The iterm2 library prints connection banners, authenticates through a
# blocking osascript call and calls sys.exit() on failure; in a child process
# all of that is bounded by the caller's timeout and kept off the editor screen.
#
# Usage:
#     python -m autoswap.iterm_bridge windows FILE [--marker vim ...]
#     python -m autoswap.iterm_bridge activate WINDOW_ID
#
# Exit status: 0 on success, 1 when iTerm2 is unreachable or the window is gone.

from __future__ import annotations

import argparse
import sys

import iterm2

from autoswap.strategies.base import title_matches


async def session_title(session) -> str:
    """The title Vim set via escape sequence, falling back to the session name."""
    for variable in ("terminalWindowName", "name"):
        try:
            title = await session.async_get_variable(variable)
        except (iterm2.RPCException, AttributeError, TypeError):
            continue
        if title:
            return str(title)
    return ""


async def matching_window_ids(connection, file_path: str, markers: list[str]) -> list[str]:
    """Window ids whose sessions show file_path and an editor marker, in listing order."""
    app = await iterm2.async_get_app(connection)
    window_ids = []
    for window in app.terminal_windows:
        for tab in window.tabs:
            for session in tab.sessions:
                title = await session_title(session)
                if title and title_matches(title, file_path, markers):
                    window_ids.append(window.window_id)
    return window_ids


async def activate_window(connection, window_id: str) -> bool:
    app = await iterm2.async_get_app(connection)
    window = app.get_window_by_id(window_id)
    if window is None:
        return False
    await window.async_activate()
    await app.async_activate()
    return True


def run_api(coro):
    """
    Run coro(connection) against iTerm2 and return its result.

    Uses Connection directly: the module-level run_until_complete turns a
    refused connection into sys.exit(1). Returns None when iTerm2 cannot be
    reached.
    """
    try:
        return iterm2.Connection().run_until_complete(coro, False)
    except (ConnectionRefusedError, OSError) as e:
        print(f"iTerm2 API unavailable: {e}", file=sys.stderr)
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="autoswap.iterm_bridge")
    subparsers = parser.add_subparsers(dest="command", required=True)

    windows = subparsers.add_parser("windows")
    windows.add_argument("file")
    windows.add_argument("--marker", action="append", dest="markers", default=[])

    activate = subparsers.add_parser("activate")
    activate.add_argument("window_id")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "windows":
        markers = args.markers or ["vim"]
        window_ids = run_api(lambda connection: matching_window_ids(connection, args.file, markers))
        if window_ids is None:
            return 1
        for window_id in window_ids:
            print(window_id)
        return 0

    activated = run_api(lambda connection: activate_window(connection, args.window_id))
    return 0 if activated else 1


if __name__ == "__main__":
    sys.exit(main())
