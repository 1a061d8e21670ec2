"""Tests for the macOS Terminal.app / iTerm2 window lookup."""

import sys

import pytest
from conftest import ScriptedRunner, failed, timed_out

from autoswap.strategies import terminal_app
from autoswap.strategies.terminal_app import TerminalAppStrategy, applescript_string

FILE = "/Users/me/project/notes.txt"
SWAP = "/Users/me/project/.notes.txt.swp"


def make_strategy(term_program, responses=None):
    runner = ScriptedRunner(responses)
    strategy = TerminalAppStrategy(runner=runner, environ={"TERM_PROGRAM": term_program})
    return strategy, runner


class TestAppleScriptString:
    def test_quotes_and_backslashes_are_escaped(self):
        assert applescript_string('a"b\\c') == '"a\\"b\\\\c"'


class TestUnsupportedTerminal:
    def test_returns_empty_without_running_anything(self):
        strategy, runner = make_strategy("WezTerm")
        assert strategy.locate(FILE, SWAP) == ""
        assert runner.calls == []


class TestAppleTerminal:
    def test_last_matching_window(self):
        # Best-effort recency heuristic: osascript listing order is not chronological
        strategy, runner = make_strategy("Apple_Terminal", {"osascript": "1234, 5678\n"})

        assert strategy.locate(FILE, SWAP) == "Apple_Terminal:5678"
        script = runner.calls[0][2]
        assert 'name contains "notes.txt"' in script
        assert 'name contains "vim"' in script
        assert 'application "Terminal" is running' in script

    def test_no_match(self):
        strategy, _ = make_strategy("Apple_Terminal", {"osascript": "\n"})
        assert strategy.locate(FILE, SWAP) == ""

    def test_osascript_failure(self):
        strategy, _ = make_strategy("Apple_Terminal", {"osascript": failed("osascript")})
        assert strategy.locate(FILE, SWAP) == ""

    def test_focus_raises_window(self):
        strategy, runner = make_strategy("Apple_Terminal", {"osascript": ""})

        assert strategy.focus("Apple_Terminal:5678") is True
        script = runner.calls[0][2]
        assert "set index of window id 5678 to 1" in script
        assert "activate" in script

    def test_focus_failure(self):
        strategy, _ = make_strategy("Apple_Terminal", {"osascript": failed("osascript")})
        assert strategy.focus("Apple_Terminal:5678") is False


BRIDGE = "python3 -m autoswap.iterm_bridge"


@pytest.fixture
def bridge_python(monkeypatch):
    monkeypatch.setattr(terminal_app, "python_executable", lambda: "python3")


class TestITerm:
    def test_last_matching_window(self, bridge_python):
        strategy, runner = make_strategy("iTerm.app", {f"{BRIDGE} windows": "pty-B\npty-C\n"})

        assert strategy.locate(FILE, SWAP) == "iTerm.app:pty-C"
        assert runner.calls[0] == ["python3", "-m", "autoswap.iterm_bridge", "windows", FILE, "--marker", "vim"]

    def test_whole_exchange_bounded_by_iterm_timeout(self, bridge_python):
        runner = ScriptedRunner({f"{BRIDGE} windows": ""})
        strategy = TerminalAppStrategy(
            runner=runner, environ={"TERM_PROGRAM": "iTerm.app"}, iterm_timeout=1.5
        )

        assert strategy.locate(FILE, SWAP) == ""
        assert runner.timeouts == [1.5]
        assert "PYTHONPATH" in runner.envs[0]

    def test_iterm_not_running(self, bridge_python):
        strategy, _ = make_strategy("iTerm.app", {BRIDGE: failed("python3")})
        assert strategy.locate(FILE, SWAP) == ""
        assert strategy.focus("iTerm.app:pty-B") is False

    def test_exchange_exceeds_timeout(self, bridge_python):
        strategy, _ = make_strategy("iTerm.app", {BRIDGE: timed_out("python3", 2.0)})
        assert strategy.locate(FILE, SWAP) == ""
        assert strategy.focus("iTerm.app:pty-B") is False

    def test_focus_activates_window(self, bridge_python):
        strategy, runner = make_strategy("iTerm.app", {f"{BRIDGE} activate": ""})

        assert strategy.focus("iTerm.app:pty-B") is True
        assert runner.calls[0][-2:] == ["activate", "pty-B"]

    def test_real_child_without_iterm2(self, tmp_path):
        # No iTerm2 to talk to: the child fails or times out, the caller never raises
        strategy = TerminalAppStrategy(environ={"TERM_PROGRAM": "iTerm.app"}, iterm_timeout=10)
        assert strategy.locate(str(tmp_path / "notes.txt"), str(tmp_path / ".notes.txt.swp")) == ""
        assert strategy.focus("iTerm.app:pty-B") is False


class TestPythonExecutable:
    def test_uses_running_interpreter(self, monkeypatch):
        monkeypatch.setattr(terminal_app.sys, "executable", "/usr/bin/python3.12")
        assert terminal_app.python_executable() == "/usr/bin/python3.12"

    def test_embedded_interpreter_falls_back_to_installation(self, monkeypatch, tmp_path):
        version = f"python{sys.version_info.major}.{sys.version_info.minor}"
        (tmp_path / "bin").mkdir()
        (tmp_path / "bin" / version).write_text("")
        monkeypatch.setattr(terminal_app.sys, "executable", "/usr/local/bin/vim")
        monkeypatch.setattr(terminal_app.sys, "exec_prefix", str(tmp_path))

        assert terminal_app.python_executable() == str(tmp_path / "bin" / version)


class TestHandleOwnership:
    def test_owns_terminal_handles_only(self):
        strategy, _ = make_strategy("Apple_Terminal")
        assert strategy.owns("Apple_Terminal:5678")
        assert strategy.owns("iTerm.app:pty-B")
        assert not strategy.owns("Apple_Terminal:abc")
        assert not strategy.owns("0x03a00004")
        assert not strategy.owns("/dev/pts/1 0 0")
