"""Field of influence.

For every cell (i, j) of the coefficient grid, A[i, j] is nudged by epsilon,
the system re-inverted, and the squared finite-difference sensitivity of the
whole inverse accumulated:

    FI = Σ_(i,j) ((L_(i,j) - L) / epsilon)²      (elementwise)

n² inversions, O(n⁵) overall. Work is split into one task per perturbed row
i; each task owns a private n x n accumulator and the partials are summed in
row order after the join, so the result does not depend on the worker count.

As epsilon -> 0, (L_(i,j) - L) / epsilon -> L[:, i] L[j, :], which gives the
analytic limit returned by ``field_of_influence_limit``.
"""

from __future__ import annotations

import logging
import math
import time

import numpy as np

from ioengine.config.settings import get_settings
from ioengine.engine.errors import DegenerateInputError, DimensionMismatchError, SingularMatrixError
from ioengine.engine.execution import ExecutionContext, ordered_sum, resolve_context
from ioengine.engine.inverse import InverseMethod, check_method, complement_inverse
from ioengine.engine.matrix_view import as_square_matrix

logger = logging.getLogger(__name__)


def field_of_influence(
    technical_coefficients: object,
    leontief: object,
    epsilon: float | None = None,
    *,
    context: ExecutionContext | None = None,
    method: InverseMethod = "lu",
) -> np.ndarray:
    """Sum of squared inverse sensitivities over all n² coefficient nudges.

    Args:
        technical_coefficients: A, n x n.
        leontief: L = (I - A)^{-1}, n x n (the unperturbed baseline).
        epsilon: Perturbation size. Defaults to IOENGINE_INFLUENCE_EPSILON.
        context: Worker pool. Defaults to the shared pool.
        method: "lu" re-factorises per cell; "sherman_morrison" uses the
            closed-form rank-one update of L.

    Returns:
        n x n non-negative field-of-influence matrix.

    Raises:
        DimensionMismatchError: If A and L differ in size.
        DegenerateInputError: If epsilon is zero or not finite.
        SingularMatrixError: If a perturbed system cannot be inverted.
    """
    A = as_square_matrix(technical_coefficients, "technical coefficients")
    L = as_square_matrix(leontief, "Leontief inverse")
    if A.shape != L.shape:
        msg = f"dimension mismatch: technical coefficients are {A.shape} but Leontief inverse is {L.shape}."
        raise DimensionMismatchError(msg)
    epsilon = resolve_epsilon(epsilon)
    check_method(method)

    n = A.shape[0]

    def perturb_row(i: int) -> np.ndarray:
        partial = np.zeros((n, n))
        if method == "lu":
            perturbed = A.copy()
            for j in range(n):
                perturbed[i, j] += epsilon
                new_inverse = complement_inverse(perturbed, label=f"I - A (cell {i},{j} perturbed)")
                perturbed[i, j] = A[i, j]
                partial += ((new_inverse - L) / epsilon) ** 2
        else:
            # L' - L = eps L[:, i] L[j, :] / (1 - eps L[j, i])
            for j in range(n):
                scale = 1.0 - epsilon * L[j, i]
                if scale == 0.0:
                    msg = f"I - A (cell {i},{j} perturbed) is singular."
                    raise SingularMatrixError(msg)
                partial += (np.outer(L[:, i], L[j, :]) / scale) ** 2
        return partial

    ctx = resolve_context(context)
    start = time.perf_counter()
    partials = ctx.map(perturb_row, range(n))
    influence = ordered_sum(partials, np.zeros((n, n)))
    logger.debug(
        "field of influence: n=%d, epsilon=%g, %d workers, %.1f ms",
        n, epsilon, ctx.max_workers, (time.perf_counter() - start) * 1000,
    )
    return influence


def field_of_influence_limit(leontief: object) -> np.ndarray:
    """Analytic epsilon -> 0 limit: (Σ_i L[x, i]²) · (Σ_j L[j, y]²)."""
    L = as_square_matrix(leontief, "Leontief inverse")
    row_sq = (L**2).sum(axis=1)
    col_sq = (L**2).sum(axis=0)
    return np.outer(row_sq, col_sq)


def resolve_epsilon(epsilon: float | None) -> float:
    """Return epsilon (or the configured default) after checking it is a usable divisor.

    Raises:
        DegenerateInputError: If epsilon is zero or not finite.
    """
    if epsilon is None:
        epsilon = get_settings().INFLUENCE_EPSILON
    epsilon = float(epsilon)
    if epsilon == 0.0 or not math.isfinite(epsilon):
        msg = f"degenerate input: epsilon must be finite and non-zero, got {epsilon}."
        raise DegenerateInputError(msg)
    return epsilon
