"""Type definitions: dispatch outcomes, run results and calculator errors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from . import config

R = TypeVar("R")


@dataclass(frozen=True)
class Outcome(Generic[R]):
    """Answer of an operation asked to handle a block.

    ``matched`` is the only thing the dispatcher looks at to decide whether
    the operation applied; ``value`` may be any result, falsy ones included.
    """

    matched: bool
    value: R | None = None

    @classmethod
    def of(cls, value: R) -> Outcome[R]:
        return cls(matched=True, value=value)

    def __repr__(self) -> str:
        if not self.matched:
            return "Outcome(not applicable)"
        return f"Outcome(matched, value={self.value!r})"


NOT_APPLICABLE: Outcome[Any] = Outcome(matched=False)


@dataclass
class RunResult:
    """Result of running a whole script through a calculator."""

    ok: bool
    final: Any = None
    outputs: list[str] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)
    transcript: str = ""
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {
            "ok": self.ok,
            "outputs": self.outputs,
            "diagnostics": self.diagnostics,
        }
        if self.final is not None:
            result_dict["final"] = str(self.final)
        if self.error is not None:
            result_dict["error"] = self.error
        return result_dict

    def __repr__(self) -> str:
        if not self.ok:
            return f"RunResult(ok=False, error={self.error!r})"
        return f"RunResult(ok=True, final={self.final!r}, outputs={len(self.outputs)})"


class CalculatorError(Exception):
    """Raised by an operation that applies to a block but cannot compute it.

    Recoverable errors are reported by the dispatcher, which then keeps the
    current result and moves on to the next block.
    """

    def __init__(
        self,
        message: str,
        code: str = "CALCULATOR_ERROR",
        recoverable: bool = True,
    ):
        self.message = message
        self.code = code
        self.recoverable = recoverable
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ParseError(CalculatorError):
    """Raised when a numeric literal or a matrix body cannot be parsed."""

    def __init__(self, message: str, code: str = "PARSE_ERROR"):
        super().__init__(message, code)


class ShapeMismatchError(CalculatorError):
    """Raised when operand dimensions do not fit the operation."""

    def __init__(self, message: str, code: str = "SHAPE_MISMATCH"):
        super().__init__(message, code)


class NotSquareError(CalculatorError):
    """Raised when a square matrix is required."""

    def __init__(self, m: int, n: int, operation: str):
        super().__init__(
            f"{operation} requires a square matrix, got {m}x{n}", "NOT_SQUARE"
        )
        self.shape = (m, n)


class SingularMatrixError(CalculatorError):
    """Raised when a coefficient matrix has a zero determinant."""

    def __init__(self, message: str = "Coefficient matrix is singular"):
        super().__init__(message, "SINGULAR_MATRIX")


class ZeroPivotError(CalculatorError):
    """Raised when elimination without row exchange meets a zero pivot."""

    def __init__(self, row: int):
        super().__init__(f"Zero pivot in row {row + 1}", "ZERO_PIVOT")
        self.row = row


class UnknownVariableError(CalculatorError):
    """Raised when a variable is read before anything was stored under it."""

    def __init__(self, name: str):
        super().__init__(
            f"Unknown variable: {name}",
            "UNKNOWN_VARIABLE",
            recoverable=not config.STRICT_VARIABLES,
        )
        self.name = name
