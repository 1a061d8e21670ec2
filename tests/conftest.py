"""Shared fixtures: a fake editor host and a scripted external-command runner."""

import pytest

from autoswap.errors import Error, ErrorType, Result


class FakeHost:
    """EditorHost that records messages and lets tests trigger buffer enters."""

    def __init__(self):
        self.messages = []
        self.listeners = {}
        self.removed = []
        self._next = 0

    def echo(self, message):
        self.messages.append(message)

    def add_buffer_enter_listener(self, callback):
        self._next += 1
        self.listeners[self._next] = callback
        return self._next

    def remove_listener(self, token):
        self.removed.append(token)
        self.listeners.pop(token, None)

    def enter_buffer(self):
        for callback in list(self.listeners.values()):
            callback()


class ScriptedRunner:
    """
    Stand-in for autoswap.commands.run_command.

    Responses are keyed by the leading words of the command line; the longest
    matching key wins. Unscripted commands behave like a missing tool.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.timeouts = []
        self.envs = []

    def __call__(self, args, timeout=0.5, operation="run_command", env=None):
        self.calls.append(list(args))
        self.timeouts.append(timeout)
        self.envs.append(env)
        best = None
        for key in self.responses:
            words = key.split()
            if args[:len(words)] == words and (best is None or len(words) > len(best.split())):
                best = key
        if best is None:
            return not_found(args[0])
        response = self.responses[best]
        return response if isinstance(response, Result) else Result.ok(response)

    def commands(self):
        return [call[0] for call in self.calls]


def not_found(tool):
    return Result.err(Error(error_type=ErrorType.TOOL_NOT_FOUND, message=f"{tool} not found"))


def timed_out(tool, timeout=0.5):
    return Result.err(Error(
        error_type=ErrorType.TIMEOUT_ERROR,
        message=f"{tool} timed out after {timeout}s",
        context={"tool": tool, "timeout_s": timeout},
    ))


def failed(tool, returncode=1):
    return Result.err(Error(
        error_type=ErrorType.TOOL_FAILED,
        message=f"{tool} exited with status {returncode}",
        context={"tool": tool, "returncode": returncode},
    ))


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def runner():
    return ScriptedRunner()


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep user config and session environment out of every test."""
    monkeypatch.setenv("AUTOSWAP_CONFIG", str(tmp_path / "missing-config.toml"))
    monkeypatch.delenv("AUTOSWAP_DETECT_TMUX", raising=False)
    monkeypatch.delenv("TMUX", raising=False)
