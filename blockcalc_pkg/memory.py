"""Named variables shared by the operations of one calculator."""

from __future__ import annotations

import sys
from typing import Generic, Iterator, TextIO, TypeVar

from .engine import Operation
from .output import render_variables
from .types import NOT_APPLICABLE, Outcome, UnknownVariableError

R = TypeVar("R")


class VariableStore(Generic[R]):
    """Name-to-result memory. Entries are overwritten, never removed."""

    def __init__(self):
        self._values: dict[str, R] = {}

    def get(self, name: str) -> R:
        """Return the value stored under name.

        Raises:
            UnknownVariableError: If nothing was stored under name
        """
        if name not in self._values:
            raise UnknownVariableError(name)
        return self._values[name]

    def lookup(self, name: str) -> R | None:
        return self._values.get(name)

    def put(self, name: str, value: R) -> None:
        self._values[name] = value

    def items(self) -> Iterator[tuple[str, R]]:
        return iter(list(self._values.items()))

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)


class OperationWithMemory(Operation[R]):
    """Base for operations that read or write a shared VariableStore."""

    def __init__(self, store: VariableStore[R]):
        self.store = store


def format_variable(name: str, value: object) -> str:
    """Format one variable listing line.

    Multi-line values start on the line after the name and every line of
    the value is indented by one space.
    """
    text = str(value)
    if "\n" in text:
        text = "\n " + text.replace("\n", "\n ")
    return f"{name} = {text}"


class ShowVariables(OperationWithMemory[R]):
    """``show``: list every stored variable, keep the current result.

    In ``json`` output format the listing is a single JSON object.
    """

    def __init__(
        self,
        store: VariableStore[R],
        out: TextIO | None = None,
        output_format: str = "human",
    ):
        super().__init__(store)
        self.out = out
        self.output_format = output_format

    def try_apply(self, tokens, block, current):
        if len(block) != 1:
            return NOT_APPLICABLE
        if len(tokens) == 1 and tokens[0] == "show":
            if self.output_format == "json":
                lines = [render_variables(self.store.items())]
            else:
                lines = [format_variable(name, value) for name, value in self.store.items()]
            for line in lines:
                print(line, file=self.out or sys.stdout)
            return Outcome.of(current)
        return NOT_APPLICABLE


class LoadStore(OperationWithMemory[R]):
    """``load NAME`` and ``store NAME``."""

    def try_apply(self, tokens, block, current):
        if len(block) != 1 or len(tokens) != 2:
            return NOT_APPLICABLE
        if tokens[0] == "load":
            return Outcome.of(self.store.get(tokens[1]))
        if tokens[0] == "store":
            self.store.put(tokens[1], current)
            return Outcome.of(current)
        return NOT_APPLICABLE
