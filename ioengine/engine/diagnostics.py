"""Productivity diagnostics for a transactions table.

Reports rather than raises: economically invalid tables (spectral radius
>= 1, negative flows) are valid inputs to this check, and the report says
which conditions fail. Analyses themselves assume the Hawkins-Simon
condition holds and cannot repair a table that violates it.

Checks:
1. T non-negativity
2. p positivity (no zero-output sectors)
3. Spectral radius of A < 1 (Hawkins-Simon / productivity condition)
4. Value added positive for all sectors (column sums of A < 1)
5. Leontief inverse L = (I-A)^{-1} is non-negative
6. Output multipliers in a plausible range [1.0, 5.0]
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from ioengine.engine.coefficients import technical_coefficients, value_added_from_table
from ioengine.engine.errors import SingularMatrixError
from ioengine.engine.inverse import complement_inverse
from ioengine.engine.matrix_view import as_square_matrix, as_vector
from ioengine.engine.multipliers import output_multiplier_total

NEGATIVE_TOLERANCE = 1e-10
MULTIPLIER_RANGE = (1.0, 5.0)


@dataclass(frozen=True)
class ProductivityReport:
    """Table diagnostics; ``is_valid`` is True when no error was recorded."""

    is_valid: bool
    spectral_radius: float
    all_t_nonnegative: bool
    all_p_positive: bool
    all_va_positive: bool
    l_nonnegative: bool
    output_multipliers: dict[str, float]
    va_ratios: dict[str, float]
    total_output: float
    total_value_added: float
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def spectral_radius(matrix: object) -> float:
    """Largest absolute eigenvalue of a square matrix."""
    M = as_square_matrix(matrix)
    return float(np.max(np.abs(np.linalg.eigvals(M))))


def check_productivity(
    transactions: object,
    production: object,
    sector_codes: list[str] | None = None,
) -> ProductivityReport:
    """Run every table diagnostic and collect the findings.

    Raises:
        DimensionMismatchError: If T is not square or p has the wrong length.
    """
    T = as_square_matrix(transactions, "transactions")
    n = T.shape[0]
    p = as_vector(production, n, "production")

    if sector_codes is None:
        sector_codes = [f"S{i}" for i in range(n)]

    errors: list[str] = []
    warnings: list[str] = []

    all_t_nonneg = bool(np.all(T >= 0))
    if not all_t_nonneg:
        errors.append(f"T has {int(np.sum(T < 0))} negative entries")

    all_p_pos = bool(np.all(p > 0))
    if not all_p_pos:
        bad = [sector_codes[i] for i in range(n) if p[i] <= 0]
        errors.append(f"Zero or negative output in sectors: {bad}")

    rho = 0.0
    all_va_positive = False
    l_nonneg = False
    multiplier_dict: dict[str, float] = {}
    va_dict: dict[str, float] = {}

    if all_p_pos:
        A = technical_coefficients(T, p)

        rho = spectral_radius(A)
        if rho >= 1.0:
            errors.append(f"Spectral radius = {rho:.6f} (must be < 1)")

        va_arr = value_added_from_table(T, p) / p
        va_dict = {sector_codes[i]: float(va_arr[i]) for i in range(n)}
        all_va_positive = bool(np.all(va_arr > 0))
        if not all_va_positive:
            bad = [
                f"{sector_codes[i]} (VA={va_arr[i]:.4f})"
                for i in range(n) if va_arr[i] <= 0
            ]
            errors.append(f"Negative value-added: {bad}")

        if rho < 1.0:
            try:
                L = complement_inverse(A, label="I - A")
            except SingularMatrixError as exc:
                errors.append(str(exc))
            else:
                l_nonneg = bool(np.all(L >= -NEGATIVE_TOLERANCE))
                if not l_nonneg:
                    errors.append(
                        f"Leontief inverse has {int(np.sum(L < -NEGATIVE_TOLERANCE))} negative entries"
                    )

                multipliers = output_multiplier_total(L)
                multiplier_dict = {
                    sector_codes[i]: round(float(multipliers[i]), 4) for i in range(n)
                }
                low, high = MULTIPLIER_RANGE
                for i in range(n):
                    m = multipliers[i]
                    if m < low:
                        warnings.append(f"Multiplier for {sector_codes[i]} = {m:.4f} (< {low})")
                    elif m > high:
                        warnings.append(f"Multiplier for {sector_codes[i]} = {m:.4f} (> {high})")

    total_output = float(np.sum(p))
    total_value_added = float(np.sum(value_added_from_table(T, p)))

    return ProductivityReport(
        is_valid=not errors,
        spectral_radius=rho,
        all_t_nonnegative=all_t_nonneg,
        all_p_positive=all_p_pos,
        all_va_positive=all_va_positive,
        l_nonnegative=l_nonneg,
        output_multipliers=multiplier_dict,
        va_ratios=va_dict,
        total_output=total_output,
        total_value_added=total_value_added,
        errors=errors,
        warnings=warnings,
    )
