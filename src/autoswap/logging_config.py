# =============================================================================
# Structured Logging Setup (JSONL format)
# =============================================================================

from __future__ import annotations

import json
import sys
import traceback
from contextvars import ContextVar
from pathlib import Path

import platformdirs
from loguru import logger

APP_NAME = "autoswap"

# Correlation ID for one swap-exists event
trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")


def json_sink(message) -> None:
    """JSONL sink for terminal use - writes to stderr."""
    record = message.record
    log_entry = {
        "timestamp": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
        "level": record["level"].name.lower(),
        "component": record["function"],
        "operation": record["extra"].get("operation", "unknown"),
        "operation_status": record["extra"].get("status", None),
        "trace_id": record["extra"].get("trace_id") or trace_id_var.get() or None,
        "message": record["message"],
        "context": {k: v for k, v in record["extra"].items()
                    if k not in ("operation", "status", "trace_id", "metrics")},
        "metrics": record["extra"].get("metrics", {}),
        "error": None,
    }

    if record["exception"]:
        exc_type, exc_value, exc_tb = record["exception"]
        tb_lines = traceback.format_tb(exc_tb) if exc_tb else []

        log_entry["error"] = {
            "type": exc_type.__name__ if exc_type else "Unknown",
            "message": str(exc_value) if exc_value else "Unknown error",
            "traceback_lines": tb_lines,
        }

    # Logging must never take the editor down with it
    try:
        sys.stderr.write(json.dumps(log_entry, default=str) + "\n")
        sys.stderr.flush()
    except (OSError, TypeError, ValueError) as e:
        try:
            sys.stderr.write(f"[LOG_ERROR] Failed to write log: {e}\n")
        except OSError:
            pass


def setup_logger(console: bool = True, level: str = "WARNING", log_file: bool = True):
    """
    Configure loguru for machine-readable JSONL output.

    Outputs:
    - stderr: JSONL via json_sink (skipped when console is False, e.g. inside
      Vim where stderr would paint over the editor screen)
    - File: serialized JSONL with rotation in the OS log directory
      macOS: ~/Library/Logs/autoswap/
      Linux: ~/.local/state/autoswap/log/
    """
    logger.remove()
    logger.enable(APP_NAME)

    if console:
        logger.add(json_sink, level=level.upper())

    if log_file:
        log_dir = Path(platformdirs.user_log_dir(appname=APP_NAME, ensure_exists=True))
        logger.add(
            str(log_dir / "autoswap.jsonl"),
            format="{message}",
            serialize=True,
            rotation="10 MB",
            retention="7 days",
            compression="gz",
            level="DEBUG",
        )

    return logger
