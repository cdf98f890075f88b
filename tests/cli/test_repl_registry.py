"""Tests for REPL command parsing and handlers."""

from __future__ import annotations

import pytest

from lineloop.core.errors import CommandArgumentError, FileAccessError
from lineloop.frontends.cli.repl.registry import (
    CommandAction,
    CommandKind,
    dispatch_command,
    parse_command,
)


def record(ctx, line):
    """Append ``line`` to history the way the loop does before dispatch."""
    ctx.line_index = ctx.history.append(line)
    return dispatch_command(ctx, line)


class TestParseCommand:
    """Tests for parse_command."""

    def test_code_is_not_a_command(self):
        assert parse_command("x = 1") is None

    @pytest.mark.parametrize(
        "line,kind",
        [
            (":h", CommandKind.HELP),
            (":?", CommandKind.HELP),
            (":x", CommandKind.EXIT),
            (":q", CommandKind.EXIT),
            (":c", CommandKind.CLEAR),
            (":s", CommandKind.SHOW),
            (":S", CommandKind.SHOW_PRETTY),
            (":p", CommandKind.PURGE),
            (":e true", CommandKind.STACK_TRACES),
            (":r f.py", CommandKind.LOAD),
            (":l f.py", CommandKind.LOAD),
            (":H", CommandKind.HISTORY),
            (":! 3", CommandKind.RECALL),
            (":z", CommandKind.UNKNOWN),
        ],
    )
    def test_kinds(self, line, kind):
        assert parse_command(line).kind is kind

    def test_argument_is_trimmed(self):
        """The argument is what follows the command character, trimmed."""
        assert parse_command(":r   ~/a b.py  ").arg == "~/a b.py"

    def test_argument_without_space(self):
        assert parse_command(":H5").arg == "5"

    def test_bare_colon(self):
        command = parse_command(":")
        assert command.kind is CommandKind.UNKNOWN
        assert command.arg == ""

    def test_leading_whitespace(self):
        assert parse_command("  :x").kind is CommandKind.EXIT


class TestDispatch:
    """Tests for dispatch_command gating."""

    def test_code_falls_through(self, command_context):
        assert dispatch_command(command_context, "1 + 1").action is CommandAction.FALLTHROUGH

    def test_exit(self, command_context):
        assert dispatch_command(command_context, ":q").action is CommandAction.EXIT

    def test_exit_during_continuation(self, command_context):
        command_context.session.continue_with("if x {")
        assert dispatch_command(command_context, ":x").action is CommandAction.EXIT

    def test_clear_during_continuation(self, command_context):
        """:c drops the pending buffer and returns to the primary prompt."""
        command_context.session.continue_with("if x {\n1")

        result = dispatch_command(command_context, ":c")

        assert result.action is CommandAction.CONTINUE
        assert command_context.session.buffer is None
        assert command_context.session.is_primary

    def test_help_during_continuation(self, command_context, capsys):
        dispatch_command(command_context, ":h")
        assert "Available commands:" in capsys.readouterr().out

    @pytest.mark.parametrize("line", [":s", ":p", ":e true", ":H", ":! 0", ":z"])
    def test_other_commands_are_code_in_continuation(self, command_context, line):
        """Mid-statement, everything but :h :x :c is passed on as code."""
        command_context.session.continue_with("if x {")
        assert dispatch_command(command_context, line).action is CommandAction.FALLTHROUGH

    def test_unknown_command(self, command_context, capsys):
        """Unknown commands are reported and change nothing."""
        command_context.session.globals["a"] = 1

        result = dispatch_command(command_context, ":z")

        assert result.action is CommandAction.CONTINUE
        assert "Unknown command" in capsys.readouterr().out
        assert command_context.session.globals == {"a": 1}


class TestVariableCommands:
    """Tests for :s, :S and :p."""

    def test_show(self, command_context, capsys):
        command_context.session.globals.update({"a": 1, "b": "two"})
        dispatch_command(command_context, ":s")
        assert capsys.readouterr().out == "a=1\nb='two'\n"

    def test_show_pretty(self, command_context, capsys):
        command_context.session.globals["data"] = {"key": list(range(30))}
        dispatch_command(command_context, ":S")
        out = capsys.readouterr().out
        assert out.startswith("data={")
        assert len(out.splitlines()) > 1

    def test_purge_then_show_prints_nothing(self, command_context, capsys):
        command_context.session.globals.update({"a": 1, "b": 2})

        dispatch_command(command_context, ":p")
        dispatch_command(command_context, ":s")

        assert command_context.session.globals == {}
        assert capsys.readouterr().out == ""


class TestStackTraces:
    """Tests for :e."""

    @pytest.mark.parametrize("arg,expected", [("true", True), ("FALSE", False), ("True", True)])
    def test_set(self, command_context, arg, expected):
        command_context.session.show_stack_traces = not expected
        dispatch_command(command_context, f":e {arg}")
        assert command_context.session.show_stack_traces is expected

    @pytest.mark.parametrize("line", [":e", ":e yes", ":e 1"])
    def test_invalid_argument(self, command_context, line):
        """Anything but true/false is rejected and the flag is unchanged."""
        with pytest.raises(CommandArgumentError, match="true or false"):
            dispatch_command(command_context, line)
        assert command_context.session.show_stack_traces is False


class TestLoad:
    """Tests for :r and :l."""

    def test_reads_file(self, command_context, tmp_path):
        script = tmp_path / "script.txt"
        script.write_text("a = 1\na + 1\n")

        result = dispatch_command(command_context, f":r {script}")

        assert result.action is CommandAction.EVALUATE
        assert result.source == "a = 1\na + 1\n"
        assert result.from_file is True

    def test_alias(self, command_context, tmp_path):
        script = tmp_path / "script.txt"
        script.write_text("1")
        assert dispatch_command(command_context, f":l {script}").source == "1"

    def test_missing_file(self, command_context, tmp_path):
        with pytest.raises(FileAccessError):
            dispatch_command(command_context, f":r {tmp_path / 'missing.txt'}")

    def test_directory(self, command_context, tmp_path):
        with pytest.raises(FileAccessError):
            dispatch_command(command_context, f":r {tmp_path}")

    def test_no_path(self, command_context):
        with pytest.raises(CommandArgumentError, match="No file given"):
            dispatch_command(command_context, ":r")


class TestHistoryCommands:
    """Tests for :H and :!."""

    @pytest.fixture
    def numbered_history(self, command_context):
        """History holding entries 10..14."""
        history = command_context.history
        history._next_index = 10
        for i in range(10, 15):
            history.append(f"line {i}")
        return history

    def test_window(self, command_context, numbered_history, capsys):
        """:H 3 lists the three entries before the :H line itself."""
        command_context.line_index = None

        dispatch_command(command_context, ":H 3")

        assert capsys.readouterr().out == "12: line 12\n13: line 13\n14: line 14\n"

    def test_window_excludes_own_line(self, command_context, numbered_history, capsys):
        record(command_context, ":H 3")
        assert capsys.readouterr().out == "12: line 12\n13: line 13\n14: line 14\n"

    def test_default_window(self, command_context, numbered_history, capsys):
        command_context.config.history_window = 2
        record(command_context, ":H")
        assert capsys.readouterr().out == "13: line 13\n14: line 14\n"

    @pytest.mark.parametrize("line,message", [(":H x", "Expected a number"), (":H 0", "positive")])
    def test_window_invalid(self, command_context, line, message):
        with pytest.raises(CommandArgumentError, match=message):
            dispatch_command(command_context, line)

    def test_recall(self, command_context, capsys):
        """:! re-runs an entry and records it again."""
        history = command_context.history
        for i in range(8):
            history.append(f"line {i}")

        result = dispatch_command(command_context, ":! 7")

        assert result.action is CommandAction.EVALUATE
        assert result.source == "line 7"
        assert len(history) == 9
        assert history.get(8) == "line 7"
        assert capsys.readouterr().out == "line 7\n"

    @pytest.mark.parametrize(
        "line,message",
        [
            (":!", "No history entry given"),
            (":! abc", "Expected a number"),
            (":! 99", "No history entry 99"),
            (":! -1", "No history entry -1"),
        ],
    )
    def test_recall_invalid(self, command_context, line, message):
        """Bad :! arguments are reported and nothing is recorded."""
        command_context.history.append("only")

        with pytest.raises(CommandArgumentError, match=message):
            dispatch_command(command_context, line)
        assert len(command_context.history) == 1
