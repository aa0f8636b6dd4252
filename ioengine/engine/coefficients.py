"""Coefficient matrices derived from a transactions table.

T[i, j] is the flow of output from sector i consumed by sector j and p is
total production per sector:

    A[i, j] = T[i, j] / p[j]    (technical coefficients, columnwise)
    F[i, j] = T[i, j] / p[i]    (allocation coefficients, rowwise)

Pure functions, no side effects. Divisors are validated before dividing.
"""

import numpy as np

from ioengine.engine.matrix_view import as_square_matrix, as_vector, require_nonzero


def _validated_table(
    transactions: object,
    production: object,
) -> tuple[np.ndarray, np.ndarray]:
    T = as_square_matrix(transactions, "transactions")
    p = as_vector(production, T.shape[0], "production")
    require_nonzero(p, "production")
    return T, p


def technical_coefficients(transactions: object, production: object) -> np.ndarray:
    """Technical coefficients: A = T · diag(p)^{-1}.

    Raises:
        DimensionMismatchError: If T is not square or len(p) != n.
        DegenerateInputError: If any p[k] == 0.
    """
    T, p = _validated_table(transactions, production)
    return T / p[np.newaxis, :]


def allocation_coefficients(transactions: object, production: object) -> np.ndarray:
    """Allocation coefficients: F = diag(p)^{-1} · T.

    Raises:
        DimensionMismatchError: If T is not square or len(p) != n.
        DegenerateInputError: If any p[k] == 0.
    """
    T, p = _validated_table(transactions, production)
    return T / p[:, np.newaxis]


def value_added_from_table(transactions: object, production: object) -> np.ndarray:
    """Primary inputs implied by the table: p[j] - Σ_i T[i, j]."""
    T = as_square_matrix(transactions, "transactions")
    p = as_vector(production, T.shape[0], "production")
    return p - T.sum(axis=0)
