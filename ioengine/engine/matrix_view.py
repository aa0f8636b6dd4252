"""Dense matrix addressing and input validation shared by all analyses.

Convention, fixed for the whole package: matrices are 2-D ``float64`` arrays
indexed ``M[row, col]`` and flat buffers are row-major
(``index = row * n_cols + col``). A column-major buffer has to be declared as
such and is transposed on the way in; nothing reinterprets a buffer silently.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal

import numpy as np

from ioengine.engine.errors import DegenerateInputError, DimensionMismatchError

BufferOrder = Literal["row", "column"]


@dataclass(frozen=True, eq=False)
class MatrixView:
    """A row-major flat buffer with explicit dimensions."""

    data: np.ndarray
    n_rows: int
    n_cols: int

    def __post_init__(self) -> None:
        if self.data.ndim != 1 or self.data.shape[0] != self.n_rows * self.n_cols:
            msg = (
                f"dimension mismatch: buffer has {self.data.size} elements, "
                f"expected {self.n_rows}x{self.n_cols}."
            )
            raise DimensionMismatchError(msg)

    @classmethod
    def from_flat(
        cls,
        buffer: object,
        n_rows: int,
        n_cols: int,
        order: BufferOrder = "row",
    ) -> MatrixView:
        """Wrap a flat buffer. ``order="column"`` transposes explicitly."""
        flat = np.asarray(buffer, dtype=np.float64).reshape(-1)
        if flat.shape[0] != n_rows * n_cols:
            msg = (
                f"dimension mismatch: buffer has {flat.shape[0]} elements, "
                f"expected {n_rows}x{n_cols}."
            )
            raise DimensionMismatchError(msg)
        if order == "row":
            data = flat.copy()
        elif order == "column":
            data = flat.reshape(n_cols, n_rows).T.reshape(-1).copy()
        else:
            msg = f"order must be 'row' or 'column', got {order!r}."
            raise ValueError(msg)
        data.flags.writeable = False
        return cls(data=data, n_rows=n_rows, n_cols=n_cols)

    @classmethod
    def from_array(cls, matrix: object) -> MatrixView:
        arr = as_matrix(matrix)
        return cls.from_flat(arr.reshape(-1), arr.shape[0], arr.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.n_rows, self.n_cols)

    def __getitem__(self, index: tuple[int, int]) -> float:
        row, col = index
        if not (0 <= row < self.n_rows and 0 <= col < self.n_cols):
            msg = f"index ({row}, {col}) out of bounds for {self.n_rows}x{self.n_cols}."
            raise IndexError(msg)
        return float(self.data[row * self.n_cols + col])

    def to_array(self) -> np.ndarray:
        """Return a fresh, writable 2-D copy."""
        return self.data.reshape(self.n_rows, self.n_cols).copy()

    def to_flat(self) -> tuple[np.ndarray, tuple[int, int]]:
        """Return the row-major buffer and its dimensions."""
        return self.data.copy(), self.shape

    def transpose(self) -> MatrixView:
        return MatrixView.from_flat(self.to_array().T.reshape(-1), self.n_cols, self.n_rows)


def square_dimension(buffer: object) -> int:
    """Return n for a flat buffer holding n*n values."""
    size = np.asarray(buffer).size
    n = math.isqrt(size)
    if n * n != size or n == 0:
        msg = f"dimension mismatch: buffer of {size} elements is not a non-empty square matrix."
        raise DimensionMismatchError(msg)
    return n


def as_matrix(matrix: object, name: str = "matrix") -> np.ndarray:
    """Coerce a MatrixView or 2-D array-like into a fresh float64 array.

    Raises:
        DimensionMismatchError: If the input is not 2-D or is empty.
        DegenerateInputError: If the input has NaN or Inf entries.
    """
    if isinstance(matrix, MatrixView):
        arr = matrix.to_array()
    else:
        arr = np.array(matrix, dtype=np.float64)
    if arr.ndim != 2 or arr.size == 0:
        msg = f"dimension mismatch: {name} must be a non-empty 2-D matrix, got shape {arr.shape}."
        raise DimensionMismatchError(msg)
    _require_finite(arr, name)
    return arr


def as_square_matrix(matrix: object, name: str = "matrix") -> np.ndarray:
    arr = as_matrix(matrix, name)
    if arr.shape[0] != arr.shape[1]:
        msg = f"dimension mismatch: {name} must be square, got shape {arr.shape}."
        raise DimensionMismatchError(msg)
    return arr


def as_vector(vector: object, n: int, name: str = "vector") -> np.ndarray:
    """Coerce a 1-D array-like (or a 1xn / nx1 matrix) of length n."""
    arr = np.array(vector, dtype=np.float64)
    if arr.ndim == 2 and 1 in arr.shape:
        arr = arr.reshape(-1)
    if arr.ndim != 1 or arr.shape[0] != n:
        msg = f"dimension mismatch: {name} has shape {arr.shape}, expected ({n},)."
        raise DimensionMismatchError(msg)
    _require_finite(arr, name)
    return arr


def require_nonzero(vector: np.ndarray, name: str) -> None:
    """Reject a divisor vector containing zeros."""
    zeros = np.flatnonzero(vector == 0.0)
    if zeros.size:
        msg = f"degenerate input: {name} is zero at positions {zeros.tolist()}."
        raise DegenerateInputError(msg)


def _require_finite(arr: np.ndarray, name: str) -> None:
    if not np.all(np.isfinite(arr)):
        msg = f"degenerate input: {name} contains NaN or Inf."
        raise DegenerateInputError(msg)
