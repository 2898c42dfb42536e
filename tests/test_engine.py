"""Tests for the block dispatch engine."""

import io

import pytest

from blockcalc_pkg.engine import Calculator, EmptyOperation, Operation
from blockcalc_pkg.types import NOT_APPLICABLE, CalculatorError, Outcome


class Word(Operation):
    """Matches a single fixed word and yields a fixed value."""

    def __init__(self, word, value):
        self.word = word
        self.value = value
        self.calls = 0

    def try_apply(self, tokens, block, current):
        self.calls += 1
        if tokens == [self.word]:
            return Outcome.of(self.value)
        return NOT_APPLICABLE


class Failing(Operation):
    def __init__(self, recoverable=True):
        self.recoverable = recoverable

    def try_apply(self, tokens, block, current):
        if tokens == ["boom"]:
            raise CalculatorError("it broke", "BOOM", recoverable=self.recoverable)
        return NOT_APPLICABLE


def run(blocks, operations, initial=0):
    out, err = io.StringIO(), io.StringIO()
    calculator = Calculator(blocks, operations, out=out, err=err)
    final = calculator.run(initial)
    return final, out.getvalue().splitlines(), err.getvalue()


class TestOutcome:
    def test_matched_outcome_keeps_falsy_value(self):
        outcome = Outcome.of(0)
        assert outcome.matched
        assert outcome.value == 0

    def test_not_applicable(self):
        assert not NOT_APPLICABLE.matched
        assert "not applicable" in repr(NOT_APPLICABLE)


class TestDispatch:
    def test_initial_result_is_displayed(self):
        final, lines, _ = run([], [EmptyOperation()], initial=5)
        assert final == 5
        assert lines == ["5"]

    def test_first_matching_operation_wins(self):
        first, second = Word("x", 1), Word("x", 2)
        final, lines, _ = run([["x"]], [first, second])
        assert final == 1
        assert lines == ["0", "1"]
        assert second.calls == 0

    def test_later_operation_used_when_earlier_declines(self):
        final, _, _ = run([["y"]], [Word("x", 1), Word("y", 2)])
        assert final == 2

    def test_zero_result_is_a_match(self):
        final, lines, err = run([["z"]], [Word("z", 0)], initial=9)
        assert final == 0
        assert lines == ["9", "0"]
        assert err == ""

    def test_unknown_command_is_reported_and_skipped(self):
        final, lines, err = run([["what now"], ["x"]], [Word("x", 1)])
        assert 'Unknown command: "what now"' in err
        assert final == 1
        assert lines == ["0", "1"]

    def test_blank_block_keeps_result(self):
        final, lines, _ = run([[""]], [EmptyOperation(), Word("x", 1)], initial=3)
        assert final == 3
        assert lines == ["3", "3"]

    def test_empty_operation_ignores_multi_line_blocks(self):
        _, _, err = run([["", "body"]], [EmptyOperation()])
        assert "Unknown command" in err

    def test_recoverable_error_keeps_result(self):
        fallback = Word("boom", 7)
        final, lines, err = run([["boom"], ["x"]], [Failing(), fallback, Word("x", 1)], initial=4)
        assert "Error: it broke" in err
        assert fallback.calls == 0
        assert final == 1
        assert lines == ["4", "1"]

    def test_fatal_error_propagates(self):
        out, err = io.StringIO(), io.StringIO()
        calculator = Calculator(
            [["x"], ["boom"], ["x"]],
            [Failing(recoverable=False), Word("x", 1)],
            out=out,
            err=err,
        )
        with pytest.raises(CalculatorError) as exc_info:
            calculator.run(0)
        assert exc_info.value.code == "BOOM"
        assert calculator.current == 1

    def test_step_does_not_display(self):
        out = io.StringIO()
        calculator = Calculator([], [Word("x", 1)], out=out)
        assert calculator.step(["x"], 0) == Outcome.of(1)
        assert calculator.step(["nope"], 0) is NOT_APPLICABLE
        assert out.getvalue() == ""

    def test_custom_render(self):
        out = io.StringIO()
        calculator = Calculator([["x"]], [Word("x", 12)], out=out, render=lambda r: f"<{r}>")
        calculator.run(0)
        assert out.getvalue().splitlines() == ["<0>", "<12>"]
        assert calculator.displayed == ["<0>", "<12>"]
