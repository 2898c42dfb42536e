"""Arbitrary-precision integer calculators (``int`` and ``memo``)."""

from __future__ import annotations

import operator

from . import config
from .engine import EmptyOperation, Operation
from .memory import LoadStore, OperationWithMemory, ShowVariables, VariableStore
from .parser import parse_int
from .types import NOT_APPLICABLE, CalculatorError, Outcome, ParseError, UnknownVariableError

INITIAL_RESULT = 0


def divide(a: int, b: int) -> int:
    """Integer division truncating toward zero.

    Raises:
        CalculatorError: If b is zero
    """
    if b == 0:
        raise CalculatorError("Division by zero", "DIVISION_BY_ZERO")
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


ARITHMETIC = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": divide,
}


def _single_line_pair(tokens, block) -> bool:
    return len(block) == 1 and len(tokens) == 2


class IntValue(Operation[int]):
    """A bare integer literal replaces the current result."""

    def try_apply(self, tokens, block, current):
        if len(block) != 1 or len(tokens) != 1:
            return NOT_APPLICABLE
        try:
            return Outcome.of(parse_int(tokens[0]))
        except ParseError:
            return NOT_APPLICABLE


class _IntBinary(Operation[int]):
    symbols: tuple[str, ...] = ()

    def try_apply(self, tokens, block, current):
        if not _single_line_pair(tokens, block) or tokens[0] not in self.symbols:
            return NOT_APPLICABLE
        return Outcome.of(ARITHMETIC[tokens[0]](current, parse_int(tokens[1])))


class IntAdd(_IntBinary):
    """``+ N``"""

    symbols = ("+",)


class IntSub(_IntBinary):
    """``- N``"""

    symbols = ("-",)


class IntMulDiv(_IntBinary):
    """``* N`` and ``/ N``"""

    symbols = ("*", "/")


class IntNeg(Operation[int]):
    """``neg``"""

    def try_apply(self, tokens, block, current):
        if len(block) == 1 and list(tokens) == ["neg"]:
            return Outcome.of(-current)
        return NOT_APPLICABLE


class IntArithWithMemory(OperationWithMemory[int]):
    """``+ - * /`` with an operand that is a stored variable or a literal."""

    def evaluate(self, token: str) -> int:
        value = self.store.lookup(token)
        if value is not None:
            return value
        if config.VAR_NAME_RE.match(token):
            raise UnknownVariableError(token)
        return parse_int(token)

    def try_apply(self, tokens, block, current):
        if not _single_line_pair(tokens, block) or tokens[0] not in ARITHMETIC:
            return NOT_APPLICABLE
        return Outcome.of(ARITHMETIC[tokens[0]](current, self.evaluate(tokens[1])))


def build_int_operations() -> list[Operation[int]]:
    return [
        EmptyOperation(),
        IntValue(),
        IntAdd(),
        IntSub(),
        IntMulDiv(),
        IntNeg(),
    ]


def build_memo_operations(
    store: VariableStore[int] | None = None, out=None, output_format: str = "human"
) -> list[Operation[int]]:
    """Operations of the integer calculator with variables.

    Args:
        store: Shared variable memory (a fresh one if omitted)
        out: Channel for the ``show`` listing
        output_format: "human" or "json"
    """
    store = store if store is not None else VariableStore()
    return [
        EmptyOperation(),
        IntValue(),
        IntNeg(),
        IntArithWithMemory(store),
        LoadStore(store),
        ShowVariables(store, out=out, output_format=output_format),
    ]
