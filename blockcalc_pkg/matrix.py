"""Dense real matrix kernel.

Small dense matrices stored as float64 numpy arrays. Inversion, triangular
factorization and the LR eigenvalue iteration all use plain Gaussian
elimination without row exchanges, so a zero pivot is an error even when
the matrix is invertible after reordering rows.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np

from . import config
from .logging_config import get_logger
from .parser import parse_real
from .types import (
    NotSquareError,
    ParseError,
    ShapeMismatchError,
    SingularMatrixError,
    ZeroPivotError,
)

logger = get_logger("matrix")


class Matrix:
    """An m x n matrix of real numbers.

    Every operation returns a new matrix; operands are never modified.
    """

    def __init__(self, m: int, n: int, vals: Iterable | None = None):
        self.m = m
        self.n = n
        if vals is None:
            self.vals = np.zeros((m, n), dtype=float)
        else:
            self.vals = np.array(vals, dtype=float).reshape(m, n)

    # -- construction -------------------------------------------------

    @classmethod
    def zeros(cls, k: int) -> Matrix:
        return cls(k, k)

    @classmethod
    def eye(cls, k: int) -> Matrix:
        return cls(k, k, np.eye(k))

    @classmethod
    def diagonal(cls, values: Sequence[float]) -> Matrix:
        return cls(len(values), len(values), np.diag(values))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[float]]) -> Matrix:
        """Build a matrix from a list of equally long rows."""
        m = len(rows)
        n = len(rows[0]) if m else 0
        if any(len(row) != n for row in rows):
            raise ShapeMismatchError("Rows of a matrix must have equal length")
        return cls(m, n, [list(row) for row in rows])

    @classmethod
    def read(cls, lines: Sequence[str]) -> Matrix:
        """Parse matrix rows, one whitespace-separated row per line.

        The first row fixes the number of columns.

        Args:
            lines: Row texts (e.g., ["1 2", "3 4"])

        Returns:
            Matrix with one row per line

        Raises:
            ParseError: On ragged rows or entries that are not numbers
        """
        rows = [line.split() for line in lines]
        if not rows:
            raise ParseError("Matrix literal has no rows")
        n = len(rows[0])
        for i, row in enumerate(rows):
            if len(row) != n:
                raise ParseError(
                    f"Row {i + 1} of matrix literal has {len(row)} entries, expected {n}"
                )
        return cls(len(rows), n, [[parse_real(cell) for cell in row] for row in rows])

    def copy(self) -> Matrix:
        return Matrix(self.m, self.n, self.vals)

    # -- properties ---------------------------------------------------

    @property
    def shape(self) -> tuple[int, int]:
        return (self.m, self.n)

    def is_square(self) -> bool:
        return self.m == self.n

    def size_mismatch(self, other: Matrix) -> bool:
        return self.shape != other.shape

    def _require_square(self, operation: str) -> None:
        if not self.is_square():
            raise NotSquareError(self.m, self.n, operation)

    # -- arithmetic ---------------------------------------------------

    def add(self, other: Matrix) -> Matrix:
        if self.size_mismatch(other):
            raise ShapeMismatchError(
                f"Cannot add {other.m}x{other.n} matrix to {self.m}x{self.n} matrix"
            )
        return Matrix(self.m, self.n, self.vals + other.vals)

    def sub(self, other: Matrix) -> Matrix:
        if self.size_mismatch(other):
            raise ShapeMismatchError(
                f"Cannot subtract {other.m}x{other.n} matrix from {self.m}x{self.n} matrix"
            )
        return self.add(other.smul(-1))

    def smul(self, a: float) -> Matrix:
        return Matrix(self.m, self.n, self.vals * a)

    def mul(self, other: Matrix) -> Matrix:
        if self.n != other.m:
            raise ShapeMismatchError(
                f"Cannot multiply {self.m}x{self.n} matrix by {other.m}x{other.n} matrix"
            )
        return Matrix(self.m, other.n, self.vals @ other.vals)

    # -- elimination --------------------------------------------------

    def inverse(self) -> Matrix:
        """Invert by Gauss-Jordan elimination.

        Row i of a working copy and of an identity matrix is divided by the
        pivot, then subtracted from every other row so that column i of the
        working copy becomes a unit vector. The identity ends up as the
        inverse.

        Raises:
            NotSquareError: If the matrix is not square
            ZeroPivotError: If a pivot is exactly zero
        """
        self._require_square("Inverse")
        work = self.vals.copy()
        res = np.eye(self.m)
        for i in range(self.m):
            pivot = work[i, i]
            if pivot == 0.0:
                raise ZeroPivotError(i)
            scale = 1.0 / pivot
            work[i, :] *= scale
            res[i, :] *= scale
            for j in range(self.m):
                if j != i:
                    factor = work[j, i]
                    work[j, :] -= work[i, :] * factor
                    res[j, :] -= res[i, :] * factor
        return Matrix(self.m, self.m, res)

    def upper_triangular(self) -> Matrix:
        """Upper factor U of A = L U, computed by forward elimination.

        A zero pivot whose column is already zero below the diagonal is
        passed over.

        Raises:
            NotSquareError: If the matrix is not square
            ZeroPivotError: If a zero pivot has non-zero entries below it
        """
        self._require_square("Upper triangular factor")
        work = self.vals.copy()
        for i in range(self.m):
            pivot = work[i, i]
            if pivot == 0.0:
                if np.any(work[i + 1:, i] != 0.0):
                    raise ZeroPivotError(i)
                continue
            for j in range(i + 1, self.m):
                factor = work[j, i] / pivot
                work[j, :] -= work[i, :] * factor
        return Matrix(self.m, self.m, work)

    def lower_triangular(self) -> Matrix:
        """Lower factor L of A = L U, obtained as A x inverse(U)."""
        self._require_square("Lower triangular factor")
        return self.mul(self.upper_triangular().inverse())

    def determinant(self) -> float:
        """Product of the diagonal of the upper factor; 0.0 if not square."""
        if not self.is_square():
            return 0.0
        upper = self.upper_triangular()
        det = 1.0
        for i in range(upper.m):
            det *= upper.vals[i, i]
        return float(det)

    def is_singular(self) -> bool:
        # exact comparison, no tolerance
        return self.determinant() == 0.0

    def eigenvalues(self) -> Matrix:
        """Approximate eigenvalues by LR iteration.

        The matrix is repeatedly split into L and U and recombined as U x L
        until the strictly lower part vanishes. The converged diagonal is
        returned as a diagonal matrix.

        Raises:
            NotSquareError: If the matrix is not square
            ZeroPivotError: If a factorization meets a zero pivot
        """
        self._require_square("Eigenvalue approximation")
        current = self
        residual = 0.0
        for iteration in range(1, config.EIGEN_MAX_ITERATIONS + 1):
            lower = current.lower_triangular()
            upper = current.upper_triangular()
            current = upper.mul(lower)
            residual = float(np.abs(np.tril(current.vals, k=-1)).sum())
            if residual < config.EIGEN_TOLERANCE:
                logger.debug("LR iteration converged after %d steps", iteration)
                break
        else:
            logger.warning(
                "LR iteration did not converge after %d steps (residual %g)",
                config.EIGEN_MAX_ITERATIONS,
                residual,
            )
        return Matrix.diagonal(np.diagonal(current.vals))

    def solve(self) -> Matrix:
        """Solve the linear system given by this augmented matrix [W | x].

        Returns:
            Column vector inverse(W) x

        Raises:
            ShapeMismatchError: Unless there is exactly one more column than rows
            SingularMatrixError: If W is singular
        """
        if self.n - self.m != 1:
            raise ShapeMismatchError(
                f"Augmented matrix must have one more column than rows, got {self.m}x{self.n}"
            )
        coefficients = Matrix(self.m, self.m, self.vals[:, : self.m])
        constants = Matrix(self.m, 1, self.vals[:, self.m :])
        if coefficients.is_singular():
            raise SingularMatrixError()
        return coefficients.inverse().mul(constants)

    # -- conversion ---------------------------------------------------

    def to_list(self) -> list[list[float]]:
        return self.vals.tolist()

    def allclose(self, other: Matrix, atol: float = 1e-9) -> bool:
        return self.shape == other.shape and bool(
            np.allclose(self.vals, other.vals, rtol=0.0, atol=atol)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self.vals, other.vals))

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        width = config.MATRIX_CELL_WIDTH
        precision = config.MATRIX_CELL_PRECISION
        return "\n".join(
            "[" + " ".join(f"{value:{width}.{precision}f}" for value in row) + "]"
            for row in self.vals
        )

    def __repr__(self) -> str:
        return f"Matrix({self.m}, {self.n}, {self.to_list()!r})"
