"""Matrix calculator operations.

Binary operations take their right operand either as a literal in the
block body::

    add :
    <TAB>1 2
    <TAB>3 4

or as the name of a stored variable on a single line (``add m``).
"""

from __future__ import annotations

import sys
from abc import abstractmethod
from typing import TextIO

from . import config
from .engine import EmptyOperation, Operation
from .matrix import Matrix
from .memory import LoadStore, OperationWithMemory, ShowVariables, VariableStore
from .output import render_determinant
from .parser import parse_int, parse_real
from .types import NOT_APPLICABLE, CalculatorError, NotSquareError, Outcome


def initial_result() -> Matrix:
    return Matrix(2, 2)


class MatrixValue(Operation[Matrix]):
    """``mat:`` followed by rows: the literal replaces the current result."""

    def try_apply(self, tokens, block, current):
        if len(block) > 1 and list(tokens) == ["mat"]:
            return Outcome.of(Matrix.read(block[1:]))
        return NOT_APPLICABLE


class _SizedConstructor(Operation[Matrix]):
    keyword = ""

    @abstractmethod
    def build(self, k: int) -> Matrix:
        """Square matrix of size k."""

    def try_apply(self, tokens, block, current):
        if len(block) == 1 and len(tokens) == 2 and tokens[0] == self.keyword:
            k = parse_int(tokens[1])
            if k > config.MAX_MATRIX_DIM:
                raise CalculatorError(
                    f"Matrix size {k} exceeds the limit of {config.MAX_MATRIX_DIM}",
                    "SIZE_LIMIT",
                )
            return Outcome.of(self.build(k))
        return NOT_APPLICABLE


class IdentityMatrix(_SizedConstructor):
    """``eye K``"""

    keyword = "eye"

    def build(self, k):
        return Matrix.eye(k)


class ZeroMatrix(_SizedConstructor):
    """``zero K``"""

    keyword = "zero"

    def build(self, k):
        return Matrix.zeros(k)


class _MatrixBinary(OperationWithMemory[Matrix]):
    keyword = ""

    @abstractmethod
    def combine(self, current: Matrix, operand: Matrix) -> Matrix:
        """current (op) operand"""

    def try_apply(self, tokens, block, current):
        if tokens[0] != self.keyword:
            return NOT_APPLICABLE
        if len(block) > 1 and len(tokens) == 1:
            operand = Matrix.read(block[1:])
        elif len(block) == 1 and len(tokens) == 2:
            operand = self.store.get(tokens[1])
        else:
            return NOT_APPLICABLE
        return Outcome.of(self.combine(current, operand))


class MatrixAdd(_MatrixBinary):
    keyword = "add"

    def combine(self, current, operand):
        return current.add(operand)


class MatrixSub(_MatrixBinary):
    keyword = "sub"

    def combine(self, current, operand):
        return current.sub(operand)


class MatrixMul(_MatrixBinary):
    keyword = "mul"

    def combine(self, current, operand):
        return current.mul(operand)


class MatrixDiv(_MatrixBinary):
    """Right division: current x inverse(operand)."""

    keyword = "div"

    def combine(self, current, operand):
        return current.mul(operand.inverse())


class MatrixScalarMul(Operation[Matrix]):
    """``smul A``; the number may carry a sign or a fraction (``smul -0.5``).

    The factor is the header text after the keyword, parsed as one literal,
    so ``smul 1 2`` is a malformed number rather than 12.
    """

    keyword = "smul"

    def try_apply(self, tokens, block, current):
        if len(block) == 1 and len(tokens) >= 2 and tokens[0] == self.keyword:
            factor = block[0].strip()[len(self.keyword):].strip()
            return Outcome.of(current.smul(parse_real(factor)))
        return NOT_APPLICABLE


class _UnaryCommand(Operation[Matrix]):
    keyword = ""

    @abstractmethod
    def compute(self, current: Matrix) -> Matrix:
        """New result computed from the current one."""

    def try_apply(self, tokens, block, current):
        if len(block) == 1 and list(tokens) == [self.keyword]:
            return Outcome.of(self.compute(current))
        return NOT_APPLICABLE


class InverseMatrix(_UnaryCommand):
    """``inv``: shows the determinant, inverts only a regular matrix.

    A singular (or non-square) matrix is reported and left as it is.
    """

    keyword = "inv"

    def __init__(
        self,
        out: TextIO | None = None,
        err: TextIO | None = None,
        output_format: str = "human",
    ):
        self.out = out
        self.err = err
        self.output_format = output_format

    def compute(self, current):
        det = current.determinant()
        print(render_determinant(det, self.output_format), file=self.out or sys.stdout)
        if current.is_singular():
            print(
                "Matrix is not regular; inverse does not exist",
                file=self.err or sys.stderr,
            )
            return current
        return current.inverse()


class UMatrix(_UnaryCommand):
    keyword = "umat"

    def compute(self, current):
        return current.upper_triangular()


class LMatrix(_UnaryCommand):
    keyword = "lmat"

    def compute(self, current):
        return current.lower_triangular()


class EigenValue(_UnaryCommand):
    keyword = "eigen"

    def compute(self, current):
        return current.eigenvalues()


class LinearEquation(_UnaryCommand):
    """``equation``: solve the system whose augmented matrix is current."""

    keyword = "equation"

    def compute(self, current):
        return current.solve()


class Determinant(_UnaryCommand):
    """``det``: the determinant as a 1x1 matrix."""

    keyword = "det"

    def compute(self, current):
        if not current.is_square():
            raise NotSquareError(current.m, current.n, "Determinant")
        return Matrix(1, 1, [[current.determinant()]])


def build_matrix_operations(
    store: VariableStore[Matrix] | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
    output_format: str = "human",
) -> list[Operation[Matrix]]:
    """Operations of the matrix calculator.

    Args:
        store: Shared variable memory (a fresh one if omitted)
        out: Channel for ``show`` and determinant output
        err: Channel for the not-regular diagnostic
        output_format: "human" or "json" for ``inv`` and ``show`` output
    """
    store = store if store is not None else VariableStore()
    return [
        EmptyOperation(),
        MatrixValue(),
        IdentityMatrix(),
        ZeroMatrix(),
        MatrixAdd(store),
        MatrixScalarMul(),
        MatrixSub(store),
        MatrixMul(store),
        MatrixDiv(store),
        InverseMatrix(out=out, err=err, output_format=output_format),
        UMatrix(),
        LMatrix(),
        EigenValue(),
        LinearEquation(),
        Determinant(),
        LoadStore(store),
        ShowVariables(store, out=out, output_format=output_format),
    ]
