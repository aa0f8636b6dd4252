"""Leontief and Ghosh inverses.

    L = (I - A)^{-1}     G = (I - F)^{-1}

Both are obtained by factoring I - M with LU decomposition (partial
pivoting) and solving (I - M) · X = I against the identity, rather than by
explicit inversion. Cost is O(n³) per inverse.

The rank-one update below lets the extraction and influence analyses skip
a full re-factorisation when only one column, row or cell of the base
coefficient matrix changes.
"""

import warnings
from typing import Literal

import numpy as np
from scipy import linalg as scipy_linalg

from ioengine.engine.errors import NumericalInstabilityError, SingularMatrixError
from ioengine.engine.matrix_view import as_square_matrix

InverseMethod = Literal["lu", "sherman_morrison"]


def check_method(method: str) -> None:
    """Reject anything other than "lu" or "sherman_morrison"."""
    if method not in ("lu", "sherman_morrison"):
        msg = f"method must be 'lu' or 'sherman_morrison', got {method!r}."
        raise ValueError(msg)


def leontief_inverse(technical_coefficients: object) -> np.ndarray:
    """Leontief inverse L = (I - A)^{-1}.

    Raises:
        DimensionMismatchError: If A is not square.
        SingularMatrixError: If I - A has a zero pivot.
        NumericalInstabilityError: If the solve yields NaN/Inf.
    """
    A = as_square_matrix(technical_coefficients, "technical coefficients")
    return complement_inverse(A, label="I - A")


def ghosh_inverse(allocation_coefficients: object) -> np.ndarray:
    """Ghosh inverse G = (I - F)^{-1}.

    Raises:
        DimensionMismatchError: If F is not square.
        SingularMatrixError: If I - F has a zero pivot.
        NumericalInstabilityError: If the solve yields NaN/Inf.
    """
    F = as_square_matrix(allocation_coefficients, "allocation coefficients")
    return complement_inverse(F, label="I - F")


def complement_inverse(coefficients: np.ndarray, *, label: str = "I - M") -> np.ndarray:
    """Solve (I - M) · X = I for an already-validated square M."""
    n = coefficients.shape[0]
    identity = np.eye(n)
    return lu_inverse(identity - coefficients, label=label)


def lu_inverse(matrix: np.ndarray, *, label: str = "matrix") -> np.ndarray:
    """Invert a square matrix through an LU factorisation with partial pivoting."""
    n = matrix.shape[0]
    with warnings.catch_warnings():
        # A zero pivot is reported below as SingularMatrixError instead.
        warnings.simplefilter("ignore", scipy_linalg.LinAlgWarning)
        lu, piv = scipy_linalg.lu_factor(matrix, check_finite=False)

    pivots = np.diag(lu)
    bad = np.flatnonzero((pivots == 0.0) | ~np.isfinite(pivots))
    if bad.size:
        msg = f"{label} is singular: zero pivot at position {int(bad[0])} of {n}."
        raise SingularMatrixError(msg)

    inverse = scipy_linalg.lu_solve((lu, piv), np.eye(n), check_finite=False)
    if not np.all(np.isfinite(inverse)):
        msg = f"inverse of {label} contains NaN or Inf."
        raise NumericalInstabilityError(msg)
    return inverse


def rank_one_update(
    inverse: np.ndarray,
    u: np.ndarray,
    v: np.ndarray,
) -> np.ndarray:
    """Sherman-Morrison: inverse of (M + u vᵀ) given inverse = M^{-1}.

    Raises:
        SingularMatrixError: If the updated matrix is singular.
        NumericalInstabilityError: If the update yields NaN/Inf.
    """
    Bu = inverse @ u
    vB = v @ inverse
    denominator = 1.0 + float(v @ Bu)
    if denominator == 0.0 or not np.isfinite(denominator):
        msg = "rank-one update makes the matrix singular."
        raise SingularMatrixError(msg)
    updated = inverse - np.outer(Bu, vB) / denominator
    if not np.all(np.isfinite(updated)):
        msg = "rank-one update produced NaN or Inf."
        raise NumericalInstabilityError(msg)
    return updated
