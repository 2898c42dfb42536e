"""Block dispatch engine shared by every calculator.

A calculator holds one current result. Each block read from the input is
offered, together with the tokens of its header line and the current
result, to the registered operations in order; the first operation that
reports a match supplies the new current result, which is then displayed.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, Sequence, TextIO, TypeVar

from .logging_config import get_logger
from .parser import BlockReader, tokenize
from .types import NOT_APPLICABLE, CalculatorError, Outcome

logger = get_logger("engine")

R = TypeVar("R")


class Operation(ABC, Generic[R]):
    """One command a calculator understands.

    Each operation owns its acceptance test: it inspects the header tokens
    and the block shape and either returns ``Outcome.of(new_result)`` or
    ``NOT_APPLICABLE``. Once it has accepted a block it signals failures by
    raising ``CalculatorError``.
    """

    @abstractmethod
    def try_apply(
        self, tokens: Sequence[str], block: Sequence[str], current: R
    ) -> Outcome[R]:
        """Apply this operation to a block if it accepts the block's shape."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class EmptyOperation(Operation[R]):
    """Blank input: keeps the current result."""

    def try_apply(self, tokens, block, current):
        if len(block) == 1 and list(tokens) == [""]:
            return Outcome.of(current)
        return NOT_APPLICABLE


class Calculator(Generic[R]):
    """Read-eval-print loop over blocks.

    Args:
        reader: Source of blocks
        operations: Operations in priority order; earlier ones win
        out: Channel for displayed results (default: stdout at call time)
        err: Channel for diagnostics (default: stderr at call time)
        render: Turns a result into its displayed text
    """

    def __init__(
        self,
        reader: BlockReader | Iterable[list[str]],
        operations: Sequence[Operation[R]],
        out: TextIO | None = None,
        err: TextIO | None = None,
        render: Callable[[R], str] = str,
    ):
        self.reader = reader
        self.operations = list(operations)
        self.out = out
        self.err = err
        self.render = render
        self.current: R | None = None
        self.displayed: list[str] = []

    def show(self, result: R) -> None:
        text = self.render(result)
        self.displayed.append(text)
        print(text, file=self.out or sys.stdout)

    def report(self, message: str) -> None:
        print(message, file=self.err or sys.stderr)

    def step(self, block: Sequence[str], current: R) -> Outcome[R]:
        """Dispatch one block to the first operation that accepts it."""
        tokens = tokenize(block[0])
        for operation in self.operations:
            outcome = operation.try_apply(tokens, block, current)
            if outcome.matched:
                logger.debug("Block %r handled by %r", block[0], operation)
                return outcome
        return NOT_APPLICABLE

    def run(self, initial: R) -> R:
        """Process blocks until the input is exhausted.

        Args:
            initial: Result the calculator starts from

        Returns:
            The current result once the input is exhausted

        Raises:
            CalculatorError: If an operation fails with a non-recoverable error
        """
        self.current = initial
        self.show(initial)
        for block in self.reader:
            try:
                outcome = self.step(block, self.current)
            except CalculatorError as e:
                if not e.recoverable:
                    raise
                logger.debug("Block %r failed with %s", block[0], e.code)
                self.report(f"Error: {e}")
                continue
            if not outcome.matched:
                self.report(f'Unknown command: "{block[0]}"')
                continue
            self.current = outcome.value
            self.show(self.current)
        return self.current
