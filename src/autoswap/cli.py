"""
autoswap command line.

Usage:
    autoswap handle FILE SWAP [--detect-tmux] [--json]   # print v:swapchoice
    autoswap locate FILE SWAP [--detect-tmux]            # print window handle
    autoswap probe [--detect-tmux]                       # print platform kind

The handle subcommand lets editors without embedded Python call autoswap via
system(); the deferred message is written to stderr once the directive is out.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import replace

from loguru import logger

from autoswap.config_loader import AutoswapConfig, load_config
from autoswap.handler import SwapfileEventHandler
from autoswap.host import ConsoleHost
from autoswap.locator import ActiveSessionLocator
from autoswap.logging_config import setup_logger
from autoswap.platform_probe import PlatformKind, mac_terminal_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autoswap",
        description="Find the session already editing a file and switch to it.",
    )
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument("--verbose", action="store_true", help="Log DEBUG records to stderr")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_tmux_flag(sub):
        sub.add_argument(
            "--detect-tmux",
            action="store_true",
            default=None,
            help="Look for the session among tmux panes (when inside tmux)",
        )

    handle = subparsers.add_parser("handle", help="Decide what to do with a swap file")
    handle.add_argument("file")
    handle.add_argument("swap")
    handle.add_argument("--json", action="store_true", help="Print a JSON object")
    add_tmux_flag(handle)

    locate = subparsers.add_parser("locate", help="Print the handle of the active session")
    locate.add_argument("file")
    locate.add_argument("swap")
    add_tmux_flag(locate)

    probe = subparsers.add_parser("probe", help="Print the detected platform")
    add_tmux_flag(probe)

    return parser


def _config_for(args: argparse.Namespace) -> AutoswapConfig:
    config = load_config(args.config)
    if args.detect_tmux:
        config = replace(config, detect_tmux=True)
    return config


def run_handle(args: argparse.Namespace, config: AutoswapConfig) -> int:
    host = ConsoleHost()
    handler = SwapfileEventHandler(config, host)
    directive = handler.handle(os.path.abspath(args.file), os.path.abspath(args.swap))

    if args.json:
        payload = {
            "directive": directive.value,
            "choice": directive.swapchoice,
            "message": handler.scheduler.pending,
        }
        print(json.dumps(payload))
    else:
        print(directive.swapchoice)
    sys.stdout.flush()

    # The caller has its answer; this stands in for the buffer being entered
    host.enter_buffer()
    return 0


def run_locate(args: argparse.Namespace, config: AutoswapConfig) -> int:
    locator = ActiveSessionLocator(config)
    print(locator.locate(os.path.abspath(args.file), os.path.abspath(args.swap)))
    return 0


def run_probe(args: argparse.Namespace, config: AutoswapConfig) -> int:
    kind = ActiveSessionLocator(config).probe()
    line = kind.value
    if kind == PlatformKind.MAC_TERMINAL:
        line += f" ({mac_terminal_app() or 'unsupported terminal'})"
    print(line)
    return 0


COMMANDS = {
    "handle": run_handle,
    "locate": run_locate,
    "probe": run_probe,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = _config_for(args)
    setup_logger(
        console=True,
        level="DEBUG" if args.verbose else config.log_level,
        log_file=config.log_file,
    )
    logger.debug(
        "autoswap invoked",
        operation="main",
        status="started",
        command=args.command,
        detect_tmux=config.detect_tmux,
    )
    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
