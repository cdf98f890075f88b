"""Tests for the input accumulation state machine."""

from __future__ import annotations

from unittest.mock import Mock

import pytest

from lineloop.core.accumulator import InputAccumulator
from lineloop.core.evaluator import EvaluationError, IncompleteInput, Value
from lineloop.core.session import PromptMode, Session


def make_accumulator(evaluator) -> tuple[InputAccumulator, Mock]:
    reporter = Mock()
    return InputAccumulator(evaluator, reporter), reporter


class TestTransitions:
    """Tests for PRIMARY/CONTINUATION transitions."""

    def test_multi_line_block_evaluates_once(self, brace_evaluator):
        """Three lines of a block produce one evaluation with the result."""
        accumulator, reporter = make_accumulator(brace_evaluator)
        session = Session()

        accumulator.submit(session, "if (true) {")
        assert session.prompt_mode is PromptMode.CONTINUATION
        accumulator.submit(session, "1+1")
        assert session.buffer == "if (true) {\n1+1"
        result = accumulator.submit(session, "}")

        assert result == Value(2)
        reporter.print_value.assert_called_once_with(2)
        assert session.buffer is None
        assert session.prompt_mode is PromptMode.PRIMARY
        # Only the final, complete evaluation produced output
        assert brace_evaluator.calls[-1] == "if (true) {\n1+1\n}"

    def test_continuation_appends_not_replaces(self, brace_evaluator):
        """Each incomplete line is added to the existing buffer."""
        accumulator, _ = make_accumulator(brace_evaluator)
        session = Session()

        accumulator.submit(session, "if (a) {")
        accumulator.submit(session, "if (b) {")
        accumulator.submit(session, "x")

        assert session.buffer == "if (a) {\nif (b) {\nx"
        assert session.prompt_mode is PromptMode.CONTINUATION

    def test_success_without_value_prints_nothing(self, brace_evaluator):
        """A statement with no result resets without printing."""
        accumulator, reporter = make_accumulator(brace_evaluator)
        session = Session()

        accumulator.submit(session, "x = 5")

        reporter.print_value.assert_not_called()
        assert session.globals == {"x": 5}
        assert session.is_primary

    def test_error_discards_buffer(self, brace_evaluator):
        """A hard error mid-block drops the whole pending buffer."""
        accumulator, reporter = make_accumulator(brace_evaluator)
        session = Session()

        accumulator.submit(session, "if (a) {")
        result = accumulator.submit(session, "undefined_name }")

        assert isinstance(result, EvaluationError)
        reporter.print_error.assert_called_once_with(result.message, None)
        assert session.buffer is None
        assert session.is_primary

    def test_error_detail_only_with_stack_traces(self, brace_evaluator):
        """Detail is passed to the reporter only when stack traces are on."""
        accumulator, reporter = make_accumulator(brace_evaluator)
        session = Session(show_stack_traces=True)

        result = accumulator.submit(session, "nope")

        assert isinstance(result, EvaluationError)
        reporter.print_error.assert_called_once_with(result.message, "Trace:\n  at line 1")

    def test_same_expression_twice_same_output(self, brace_evaluator):
        """Re-evaluating a pure expression prints the same value."""
        accumulator, reporter = make_accumulator(brace_evaluator)
        session = Session()

        accumulator.submit(session, "3 * 7")
        accumulator.submit(session, "3 * 7")

        assert [c.args for c in reporter.print_value.call_args_list] == [(21,), (21,)]


class TestFileInput:
    """Tests for submissions that come from :r/:l."""

    def test_incomplete_file_is_hard_error(self, brace_evaluator):
        """Incomplete file content is reported and never continues."""
        accumulator, reporter = make_accumulator(brace_evaluator)
        session = Session()

        result = accumulator.submit(session, "if (a) {\n  1\n", from_file=True)

        assert isinstance(result, IncompleteInput)
        reporter.print_error.assert_called_once_with("Unexpected end of input")
        assert session.buffer is None
        assert session.prompt_mode is PromptMode.PRIMARY

    def test_complete_file_evaluates(self, brace_evaluator):
        """Complete file content runs as one submission."""
        accumulator, reporter = make_accumulator(brace_evaluator)
        session = Session()

        accumulator.submit(session, "a = 2\nb = 3\na * b\n", from_file=True)

        reporter.print_value.assert_called_once_with(6)
        assert session.globals == {"a": 2, "b": 3}


class TestEvaluatorContract:
    """Tests for how evaluator results are consumed."""

    def test_globals_shared_by_reference(self):
        """The evaluator receives the session's own mapping."""
        evaluator = Mock()
        evaluator.evaluate.return_value = Value(None)
        accumulator, _ = make_accumulator(evaluator)
        session = Session()

        accumulator.submit(session, "anything")

        evaluator.evaluate.assert_called_once_with("anything", session.globals)
        assert evaluator.evaluate.call_args.args[1] is session.globals

    def test_unknown_result_type_rejected(self):
        """A result outside the three-way union is a TypeError."""
        evaluator = Mock()
        evaluator.evaluate.return_value = "not a result"
        accumulator, _ = make_accumulator(evaluator)

        with pytest.raises(TypeError, match="unsupported result"):
            accumulator.submit(Session(), "x")
