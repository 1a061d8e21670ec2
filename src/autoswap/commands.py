# =============================================================================
# External Command Runner
# =============================================================================
# Every OS query (lsof, ps, tmux, osascript, wmctrl) goes through run_command:
# a fresh one-shot spawn with a bounded timeout. Failures come back as
# Result errors, never as exceptions.

from __future__ import annotations

import os
import shutil
import subprocess
import time
from collections.abc import Mapping

from loguru import logger

from autoswap.errors import Error, ErrorType, Result

DEFAULT_TIMEOUT = 0.5

# Editors launched from a GUI (MacVim, gvim from a dock) inherit a minimal PATH
# that misses Homebrew and user tool locations.
_ADDITIONAL_PATHS = [
    "/opt/homebrew/bin",      # Homebrew on Apple Silicon
    "/usr/local/bin",         # Homebrew on Intel / user binaries
    "/usr/sbin",              # lsof on macOS
    "/usr/bin",
    os.path.expanduser("~/.local/bin"),
    os.path.expanduser("~/bin"),
]


def augmented_path(current_path: str | None = None) -> str:
    """
    Return PATH with common tool locations appended.

    The host process environment is left alone: inside Vim, os.environ is the
    editor's own environment.
    """
    if current_path is None:
        current_path = os.environ.get("PATH", "")
    path_dirs = [p for p in current_path.split(os.pathsep) if p]

    for additional in _ADDITIONAL_PATHS:
        if additional not in path_dirs and os.path.isdir(additional):
            path_dirs.append(additional)

    return os.pathsep.join(path_dirs)


def find_tool(name: str) -> str | None:
    """Locate an external tool on the augmented PATH."""
    return shutil.which(name, path=augmented_path())


def run_command(
    args: list[str],
    timeout: float = DEFAULT_TIMEOUT,
    operation: str = "run_command",
    env: Mapping[str, str] | None = None,
) -> Result[str]:
    """
    Run an external command and return its stdout.

    Args:
        args: Command and arguments; args[0] is looked up on the augmented PATH
        timeout: Seconds before the child is killed
        operation: Name used in log records
        env: Extra environment variables for the child

    Returns:
        Result[str]: Ok with stdout, or Err with TOOL_NOT_FOUND, TOOL_FAILED
        or TIMEOUT_ERROR
    """
    tool = args[0]
    executable = find_tool(tool)
    if executable is None:
        logger.debug(
            "External tool not found",
            operation=operation,
            status="tool_not_found",
            tool=tool,
        )
        return Result.err(Error(
            error_type=ErrorType.TOOL_NOT_FOUND,
            message=f"{tool} not found on PATH",
            context={"tool": tool},
        ))

    start_time = time.perf_counter()
    try:
        result = subprocess.run(
            [executable, *args[1:]],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,  # Non-zero exit is reported as a Result error
            env={**os.environ, **(env or {}), "PATH": augmented_path(), "LC_ALL": "C"},
        )
    except subprocess.TimeoutExpired as e:
        logger.warning(
            "External command timed out",
            operation=operation,
            status="timeout",
            tool=tool,
            timeout_s=timeout,
        )
        return Result.err(Error(
            error_type=ErrorType.TIMEOUT_ERROR,
            message=f"{tool} timed out after {timeout}s",
            context={"tool": tool, "timeout_s": timeout},
            original_exception=e,
        ))
    except OSError as e:
        logger.warning(
            "OS error running external command",
            operation=operation,
            status="os_error",
            tool=tool,
            error=str(e),
            errno=e.errno,
        )
        return Result.err(Error(
            error_type=ErrorType.TOOL_FAILED,
            message=str(e),
            context={"tool": tool},
            original_exception=e,
        ))

    duration_ms = int((time.perf_counter() - start_time) * 1000)

    if result.returncode != 0:
        logger.debug(
            "External command exited non-zero",
            operation=operation,
            status="failed",
            tool=tool,
            returncode=result.returncode,
            stderr=result.stderr[:500] if result.stderr else None,
            metrics={"duration_ms": duration_ms},
        )
        return Result.err(Error(
            error_type=ErrorType.TOOL_FAILED,
            message=f"{tool} exited with status {result.returncode}",
            context={"tool": tool, "returncode": result.returncode},
        ))

    logger.debug(
        "External command complete",
        operation=operation,
        status="success",
        tool=tool,
        metrics={"duration_ms": duration_ms},
    )
    return Result.ok(result.stdout or "")
