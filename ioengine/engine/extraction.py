"""Hypothetical extraction analysis.

Backward (demand side): for each sector j, zero column j of A, re-invert,
and measure total output needed to satisfy final demand:

    new_output = L_(-j) · rowsum(FD)
    delta      = Σ new_output - Σ p

Forward (supply side): for each sector i, zero row i of F, re-invert, and
push primary inputs through the Ghosh inverse:

    new_output = colsum(VA) · G_(-i)

Each sector row of the result is (delta, delta / Σ p). Sectors are
independent: every task zeroes its own copy of the coefficient matrix, so
no task ever sees another task's extraction.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from ioengine.engine.errors import DegenerateInputError, DimensionMismatchError
from ioengine.engine.execution import ExecutionContext, resolve_context
from ioengine.engine.inverse import InverseMethod, check_method, complement_inverse, rank_one_update
from ioengine.engine.matrix_view import as_matrix, as_square_matrix, as_vector, require_nonzero

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractionResult:
    """Backward, forward and total extraction, each n x 2 (absolute, relative)."""

    backward: np.ndarray
    forward: np.ndarray
    total: np.ndarray


def backward_extraction(
    technical_coefficients: object,
    final_demand: object,
    production: object,
    *,
    context: ExecutionContext | None = None,
    method: InverseMethod = "lu",
) -> np.ndarray:
    """Output loss from removing each sector's purchases (columns of A).

    Args:
        technical_coefficients: A, n x n.
        final_demand: FD, n x k (a length-n vector is one account).
        production: p, length n.
        context: Worker pool to fan sectors out on. Defaults to the shared pool.
        method: "lu" re-factorises per sector; "sherman_morrison" updates
            the base inverse instead.

    Returns:
        n x 2 array of (absolute, relative) output change per sector.

    Raises:
        DimensionMismatchError: If FD or p disagree with A on n.
        DegenerateInputError: If p has a zero entry or sums to zero.
        SingularMatrixError: If an extracted system cannot be inverted.
    """
    A = as_square_matrix(technical_coefficients, "technical coefficients")
    n = A.shape[0]
    fd = account_matrix(final_demand, n, "final demand", sectors_on="rows")
    total_output = _total_output(production, n)
    demand = fd.sum(axis=1)
    check_method(method)

    base = complement_inverse(A, label="I - A") if method == "sherman_morrison" else None

    def extract(j: int) -> float:
        if base is None:
            extracted = A.copy()
            extracted[:, j] = 0.0
            inverse = complement_inverse(extracted, label=f"I - A (sector {j} extracted)")
        else:
            # I - A' = (I - A) + A[:, j] e_jᵀ
            e_j = np.zeros(n)
            e_j[j] = 1.0
            inverse = rank_one_update(base, A[:, j], e_j)
        return float((inverse @ demand).sum())

    return _run(extract, n, total_output, context, side="backward")


def forward_extraction(
    allocation_coefficients: object,
    value_added: object,
    production: object,
    *,
    context: ExecutionContext | None = None,
    method: InverseMethod = "lu",
) -> np.ndarray:
    """Output loss from removing each sector's sales (rows of F).

    Args:
        allocation_coefficients: F, n x n.
        value_added: VA, k' x n (a length-n vector is one account).
        production: p, length n.
        context: Worker pool to fan sectors out on. Defaults to the shared pool.
        method: "lu" or "sherman_morrison", as for backward_extraction.

    Returns:
        n x 2 array of (absolute, relative) output change per sector.
    """
    F = as_square_matrix(allocation_coefficients, "allocation coefficients")
    n = F.shape[0]
    va = account_matrix(value_added, n, "value added", sectors_on="columns")
    total_output = _total_output(production, n)
    supply = va.sum(axis=0)
    check_method(method)

    base = complement_inverse(F, label="I - F") if method == "sherman_morrison" else None

    def extract(i: int) -> float:
        if base is None:
            extracted = F.copy()
            extracted[i, :] = 0.0
            inverse = complement_inverse(extracted, label=f"I - F (sector {i} extracted)")
        else:
            # I - F' = (I - F) + e_i F[i, :]
            e_i = np.zeros(n)
            e_i[i] = 1.0
            inverse = rank_one_update(base, e_i, F[i, :])
        return float((supply @ inverse).sum())

    return _run(extract, n, total_output, context, side="forward")


def total_extraction(backward: object, forward: object) -> np.ndarray:
    """Elementwise sum of backward and forward extraction results."""
    bwd = as_matrix(backward, "backward extraction")
    fwd = as_matrix(forward, "forward extraction")
    if bwd.shape != fwd.shape or bwd.shape[1] != 2:
        msg = f"dimension mismatch: backward is {bwd.shape} but forward is {fwd.shape} (expected n x 2)."
        raise DimensionMismatchError(msg)
    return bwd + fwd


def extraction_analysis(
    technical_coefficients: object,
    allocation_coefficients: object,
    final_demand: object,
    value_added: object,
    production: object,
    *,
    context: ExecutionContext | None = None,
    method: InverseMethod = "lu",
) -> ExtractionResult:
    backward = backward_extraction(
        technical_coefficients, final_demand, production, context=context, method=method,
    )
    forward = forward_extraction(
        allocation_coefficients, value_added, production, context=context, method=method,
    )
    return ExtractionResult(
        backward=backward,
        forward=forward,
        total=total_extraction(backward, forward),
    )


def account_matrix(accounts: object, n: int, name: str, *, sectors_on: str) -> np.ndarray:
    """Coerce FD (sectors on rows) or VA (sectors on columns) to 2-D."""
    arr = np.array(accounts, dtype=np.float64)
    if arr.ndim == 1:
        # a single account
        arr = arr[:, np.newaxis] if sectors_on == "rows" else arr[np.newaxis, :]
    arr = as_matrix(arr, name)
    size = arr.shape[0] if sectors_on == "rows" else arr.shape[1]
    if size != n:
        expected = f"{n} x k" if sectors_on == "rows" else f"k x {n}"
        msg = f"dimension mismatch: {name} has shape {arr.shape}, expected {expected}."
        raise DimensionMismatchError(msg)
    return arr


def _total_output(production: object, n: int) -> float:
    p = as_vector(production, n, "production")
    require_nonzero(p, "production")
    total = float(p.sum())
    if total == 0.0:
        msg = "degenerate input: total production sums to zero."
        raise DegenerateInputError(msg)
    return total


def _run(
    extract: Callable[[int], float],
    n: int,
    total_output: float,
    context: ExecutionContext | None,
    *,
    side: str,
) -> np.ndarray:
    ctx = resolve_context(context)
    start = time.perf_counter()
    new_totals = ctx.map(extract, range(n))
    logger.debug(
        "%s extraction: %d sectors on %d workers in %.1f ms",
        side, n, ctx.max_workers, (time.perf_counter() - start) * 1000,
    )

    result = np.empty((n, 2))
    result[:, 0] = np.asarray(new_totals) - total_output
    result[:, 1] = result[:, 0] / total_output
    return result
