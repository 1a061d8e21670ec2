# =============================================================================
# Vim / Neovim Integration
# =============================================================================
# Runs inside the editor's embedded Python (:py3). The `vim` module is supplied
# by the editor at runtime. plugin/autoswap.vim wires the autocommands.

from __future__ import annotations

import itertools
from collections.abc import Callable, Hashable
from dataclasses import replace

from loguru import logger

from autoswap.config_loader import AutoswapConfig, load_config
from autoswap.handler import OutcomeDirective, SwapfileEventHandler
from autoswap.logging_config import setup_logger
from autoswap.notifications import NotificationScheduler

AUGROUP = "autoswap_msg"

_callbacks: dict[int, Callable[[], None]] = {}
_tokens = itertools.count(1)
_config: AutoswapConfig | None = None
_scheduler: NotificationScheduler | None = None


def _vim():
    import vim
    return vim


def vim_string(value: str) -> str:
    """Quote a Python string as a Vim single-quoted string literal."""
    return "'" + str(value).replace("'", "''") + "'"


class VimHost:
    def __init__(self, vim_module=None):
        self.vim = vim_module if vim_module is not None else _vim()

    def echo(self, message: str) -> None:
        self.vim.command("echohl WarningMsg")
        try:
            self.vim.command(f"echomsg {vim_string(message)}")
        finally:
            self.vim.command("echohl None")

    def add_buffer_enter_listener(self, callback: Callable[[], None]) -> int:
        token = next(_tokens)
        _callbacks[token] = callback
        self.vim.command(f"augroup {AUGROUP}")
        self.vim.command(
            "autocmd BufWinEnter * ++once "
            f"py3 __import__('autoswap.vim_host').vim_host.dispatch({token})"
        )
        self.vim.command("augroup END")
        return token

    def remove_listener(self, token: Hashable) -> None:
        if _callbacks.pop(token, None) is None:
            return
        self.vim.command(f"augroup {AUGROUP}")
        self.vim.command("autocmd!")
        self.vim.command("augroup END")


def dispatch(token: int) -> None:
    """Entry point for the BufWinEnter autocommand."""
    callback = _callbacks.get(token)
    if callback is None:
        return
    try:
        callback()
    except (Exception, SystemExit):
        logger.exception("Deferred message failed", operation="dispatch", status="error")


def _detect_tmux_override(vim_module) -> bool | None:
    value = vim_module.eval("get(g:, 'autoswap_detect_tmux', '')")
    if value in ("", None):
        return None
    try:
        return bool(int(value))
    except (TypeError, ValueError):
        return None


def _session_config(vim_module) -> AutoswapConfig:
    global _config
    if _config is None:
        _config = load_config()
        setup_logger(console=False, log_file=_config.log_file)
    override = _detect_tmux_override(vim_module)
    return _config if override is None else replace(_config, detect_tmux=override)


def on_swap_exists() -> None:
    """
    SwapExists autocommand: pick v:swapchoice for <afile>.

    Any failure falls back to opening read-only rather than erroring in the
    middle of the editor's open.
    """
    global _scheduler
    vim_module = _vim()
    directive = OutcomeDirective.OPEN_READ_ONLY
    try:
        config = _session_config(vim_module)
        host = VimHost(vim_module)
        if _scheduler is None:
            _scheduler = NotificationScheduler(host)
        handler = SwapfileEventHandler(config, host, scheduler=_scheduler)
        file_path = str(vim_module.eval("expand('<afile>:p')"))
        swap_path = str(vim_module.eval("v:swapname"))
        directive = handler.handle(file_path, swap_path)
    except (Exception, SystemExit):
        logger.exception("Swap file handling failed", operation="on_swap_exists", status="error")
    vim_module.command(f"let v:swapchoice = {vim_string(directive.swapchoice)}")
