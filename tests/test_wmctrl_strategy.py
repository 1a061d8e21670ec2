"""Tests for the wmctrl window lookup."""

from conftest import ScriptedRunner, failed

from autoswap.strategies.wmctrl import WmctrlStrategy

FILE = "/home/me/project/notes.txt"
SWAP = "/home/me/project/.notes.txt.swp"

WINDOWS = (
    "0x01e00003  0 laptop Firefox\n"
    "0x03a00004  1 laptop notes.txt (~/project) - VIM\n"
    "0x03a00010  1 laptop todo.txt (~/project) - VIM\n"
    "0x04200001 -1 laptop\n"
)


def make_strategy(responses, **kwargs):
    runner = ScriptedRunner(responses)
    return WmctrlStrategy(runner=runner, **kwargs), runner


class TestWmctrlLocate:
    def test_matches_title_with_file_and_marker(self):
        strategy, _ = make_strategy({"wmctrl -l": WINDOWS})
        assert strategy.locate(FILE, SWAP) == "0x03a00004"

    def test_case_insensitive(self):
        strategy, _ = make_strategy({"wmctrl -l": "0x00000042  0 host NOTES.TXT + (~) - gvim\n"})
        assert strategy.locate(FILE, SWAP) == "0x00000042"

    def test_last_match_wins(self):
        # Best-effort recency heuristic: wmctrl does not promise ordering
        listing = WINDOWS + "0x05000001  2 laptop notes.txt (~/other) - VIM\n"
        strategy, _ = make_strategy({"wmctrl -l": listing})
        assert strategy.locate(FILE, SWAP) == "0x05000001"

    def test_requires_editor_marker(self):
        strategy, _ = make_strategy({"wmctrl -l": "0x00000042  0 host notes.txt - gedit\n"})
        assert strategy.locate(FILE, SWAP) == ""

    def test_custom_markers(self):
        strategy, _ = make_strategy(
            {"wmctrl -l": "0x00000042  0 host notes.txt - NVIM\n"},
            editor_markers=["nvim"],
        )
        assert strategy.locate(FILE, SWAP) == "0x00000042"

    def test_wmctrl_missing(self):
        strategy, _ = make_strategy({})
        assert strategy.locate(FILE, SWAP) == ""

    def test_wmctrl_fails(self):
        strategy, _ = make_strategy({"wmctrl -l": failed("wmctrl")})
        assert strategy.locate(FILE, SWAP) == ""

    def test_windows_without_title_are_parsed(self):
        strategy, _ = make_strategy({"wmctrl -l": WINDOWS})
        assert ("0x04200001", "") in strategy.list_windows()


class TestWmctrlFocus:
    def test_activates_by_id(self):
        strategy, runner = make_strategy({"wmctrl -i -a": ""})
        assert strategy.focus("0x03a00004") is True
        assert runner.calls == [["wmctrl", "-i", "-a", "0x03a00004"]]

    def test_failure_is_reported(self):
        strategy, _ = make_strategy({"wmctrl -i -a": failed("wmctrl")})
        assert strategy.focus("0x03a00004") is False

    def test_owns_only_window_ids(self):
        strategy, _ = make_strategy({})
        assert strategy.owns("0x03a00004")
        assert not strategy.owns("/dev/pts/7 2 1")
        assert not strategy.owns("0x")
