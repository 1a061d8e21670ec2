# =============================================================================
# Configuration Loading
# =============================================================================

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

import platformdirs
from loguru import logger

CONFIG_DIR = Path(platformdirs.user_config_dir("autoswap"))
CONFIG_PATH = CONFIG_DIR / "config.toml"

ENV_CONFIG_PATH = "AUTOSWAP_CONFIG"
ENV_DETECT_TMUX = "AUTOSWAP_DETECT_TMUX"

# Default configuration - safe values that work without user config
DEFAULT_CONFIG = {
    "detection": {
        "tmux": False,  # Multiplexer-aware detection is opt-in
    },
    "commands": {
        "timeout": 0.5,  # Seconds; a hung tool must not hang the editor
        "iterm_timeout": 2.0,  # Seconds for the whole iTerm2 API exchange (child Python start included)
    },
    "matching": {
        "editor_markers": ["vim"],
    },
    "logging": {
        "level": "WARNING",
        "file": True,
    },
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class AutoswapConfig:
    detect_tmux: bool = False
    command_timeout: float = 0.5
    iterm_timeout: float = 2.0
    editor_markers: tuple[str, ...] = ("vim",)
    log_level: str = "WARNING"
    log_file: bool = True

    @classmethod
    def from_dict(cls, config: dict) -> "AutoswapConfig":
        raw_markers = config["matching"].get("editor_markers", [])
        if isinstance(raw_markers, str):
            raw_markers = [raw_markers]
        markers = tuple(str(m) for m in raw_markers if str(m).strip())
        return cls(
            detect_tmux=bool(config["detection"]["tmux"]),
            command_timeout=float(config["commands"]["timeout"]),
            iterm_timeout=float(config["commands"]["iterm_timeout"]),
            editor_markers=markers or ("vim",),
            log_level=str(config["logging"]["level"]).upper(),
            log_file=bool(config["logging"]["file"]),
        )


def parse_bool(value: str | None) -> bool | None:
    """Parse an on/off string from the environment; None when unrecognized."""
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def extract_toml_error_context(error: tomllib.TOMLDecodeError, file_path: Path) -> dict:
    """
    Extract line context from TOML parse error.

    Returns:
        Dict with line_number, line_content, and formatted_message
    """
    error_str = str(error)
    line_number = None
    line_content = None

    # Common formats: "line 15", "at line 15", "(line 15)"
    line_match = re.search(r"line\s+(\d+)", error_str, re.IGNORECASE)
    if line_match:
        line_number = int(line_match.group(1))

    if line_number and file_path.exists():
        try:
            lines = file_path.read_text().splitlines()
            if 0 < line_number <= len(lines):
                line_content = lines[line_number - 1].rstrip()
        except OSError:
            pass

    if line_number:
        formatted = f"Error on line {line_number}"
        if line_content:
            display_line = line_content[:50] + "..." if len(line_content) > 50 else line_content
            formatted += f": {display_line}"
        formatted += f"\n\nDetails: {error_str}"
    else:
        formatted = f"TOML parse error: {error_str}"

    return {
        "line_number": line_number,
        "line_content": line_content,
        "formatted_message": formatted,
        "raw_error": error_str,
    }


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base dictionary."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def resolve_config_path(path: Path | str | None = None) -> Path:
    """Explicit path, then $AUTOSWAP_CONFIG, then the platform config dir."""
    if path:
        return Path(path).expanduser()
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path).expanduser()
    return CONFIG_PATH


def load_config(path: Path | str | None = None) -> AutoswapConfig:
    """
    Load configuration from TOML file with defaults fallback.

    A missing file or invalid TOML yields the defaults; autoswap must keep
    working with no configuration at all.
    """
    config_path = resolve_config_path(path)
    merged = DEFAULT_CONFIG

    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                user_config = tomllib.load(f)
            merged = deep_merge(DEFAULT_CONFIG, user_config)
            logger.debug(
                "Config loaded successfully",
                operation="load_config",
                status="success",
                config_path=str(config_path),
            )
        except tomllib.TOMLDecodeError as e:
            error_context = extract_toml_error_context(e, config_path)
            logger.error(
                "Invalid TOML syntax in configuration file",
                operation="load_config",
                status="failed",
                file=str(config_path),
                line_number=error_context["line_number"],
                line_content=error_context["line_content"],
                error=error_context["formatted_message"],
            )
        except OSError as e:
            logger.error(
                "Could not read configuration file",
                operation="load_config",
                status="failed",
                file=str(config_path),
                error=str(e),
            )
    else:
        logger.debug(
            "Config file does not exist, using defaults",
            operation="load_config",
            status="default",
            config_path=str(config_path),
        )

    try:
        config = AutoswapConfig.from_dict(merged)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.error(
            "Invalid configuration values, using defaults",
            operation="load_config",
            status="failed",
            config_path=str(config_path),
            error=str(e),
            error_type=type(e).__name__,
        )
        config = AutoswapConfig.from_dict(DEFAULT_CONFIG)

    env_tmux = parse_bool(os.environ.get(ENV_DETECT_TMUX))
    if env_tmux is not None:
        config = replace(config, detect_tmux=env_tmux)

    return config
