"""Linkage and dispersion statistics on an inverse matrix (L or G).

Read-only reductions over the matrix, vectorised per row / column:

    average                 mean of all n² entries
    row_average[i]          mean of row i
    col_average[j]          mean of column j
    forward_linkage[i]      row_average[i] / average
    backward_linkage[j]     col_average[j] / average
    power_of_dispersion[j]  coefficient of variation of column j
    sensitivity_of_disp[i]  coefficient of variation of row i

Dispersion uses the sample divisor n - 1. Sectors whose forward and backward
linkages both exceed 1 are key sectors (Rasmussen-Hirschman).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

import numpy as np

from ioengine.engine.errors import DegenerateInputError
from ioengine.engine.matrix_view import as_square_matrix


class SectorClass(StrEnum):
    KEY = "KEY"
    BACKWARD_ORIENTED = "BACKWARD_ORIENTED"
    FORWARD_ORIENTED = "FORWARD_ORIENTED"
    WEAK = "WEAK"


@dataclass(frozen=True)
class LinkageProfile:
    """All linkage statistics of one inverse matrix.

    The dispersion fields are None for a single-sector matrix, where the
    n - 1 divisor is zero.
    """

    average: float
    row_average: np.ndarray
    col_average: np.ndarray
    forward_linkages: np.ndarray
    backward_linkages: np.ndarray
    power_of_dispersion_cv: np.ndarray | None
    sensitivity_of_dispersion_cv: np.ndarray | None
    sector_classes: tuple[SectorClass, ...]


def average(inverse: object) -> float:
    M = as_square_matrix(inverse, "inverse")
    return float(M.mean())


def row_average(inverse: object) -> np.ndarray:
    M = as_square_matrix(inverse, "inverse")
    return M.mean(axis=1)


def col_average(inverse: object) -> np.ndarray:
    M = as_square_matrix(inverse, "inverse")
    return M.mean(axis=0)


def forward_linkages(inverse: object) -> np.ndarray:
    """Row averages normalised by the overall average."""
    M = as_square_matrix(inverse, "inverse")
    return M.mean(axis=1) / _nonzero_average(M)


def backward_linkages(inverse: object) -> np.ndarray:
    """Column averages normalised by the overall average."""
    M = as_square_matrix(inverse, "inverse")
    return M.mean(axis=0) / _nonzero_average(M)


def power_of_dispersion_cv(inverse: object) -> np.ndarray:
    """Coefficient of variation of each column.

    sqrt(Σ_i (M[i, j] - col_average[j])² / (n - 1)) / col_average[j]
    """
    M = as_square_matrix(inverse, "inverse")
    return _coefficient_of_variation(M, axis=0)


def sensitivity_of_dispersion_cv(inverse: object) -> np.ndarray:
    """Coefficient of variation of each row.

    sqrt(Σ_j (M[i, j] - row_average[i])² / (n - 1)) / row_average[i]
    """
    M = as_square_matrix(inverse, "inverse")
    return _coefficient_of_variation(M, axis=1)


def key_sectors(inverse: object) -> tuple[SectorClass, ...]:
    """Classify sectors by backward (column) and forward (row) linkage > 1."""
    M = as_square_matrix(inverse, "inverse")
    mean = _nonzero_average(M)
    return _classify(M.mean(axis=0) / mean, M.mean(axis=1) / mean)


def linkage_profile(inverse: object) -> LinkageProfile:
    M = as_square_matrix(inverse, "inverse")
    mean = _nonzero_average(M)
    rows = M.mean(axis=1)
    cols = M.mean(axis=0)
    forward = rows / mean
    backward = cols / mean
    power = sensitivity = None
    if M.shape[0] > 1:
        power = _coefficient_of_variation(M, axis=0)
        sensitivity = _coefficient_of_variation(M, axis=1)
    return LinkageProfile(
        average=mean,
        row_average=rows,
        col_average=cols,
        forward_linkages=forward,
        backward_linkages=backward,
        power_of_dispersion_cv=power,
        sensitivity_of_dispersion_cv=sensitivity,
        sector_classes=_classify(backward, forward),
    )


def _nonzero_average(M: np.ndarray) -> float:
    mean = float(M.mean())
    if mean == 0.0:
        msg = "degenerate input: average of the inverse matrix is zero."
        raise DegenerateInputError(msg)
    return mean


def _coefficient_of_variation(M: np.ndarray, *, axis: int) -> np.ndarray:
    n = M.shape[0]
    if n < 2:
        msg = "degenerate input: dispersion needs at least 2 sectors (divisor n - 1)."
        raise DegenerateInputError(msg)
    means = M.mean(axis=axis)
    zeros = np.flatnonzero(means == 0.0)
    if zeros.size:
        kind = "column" if axis == 0 else "row"
        msg = f"degenerate input: {kind} average is zero at positions {zeros.tolist()}."
        raise DegenerateInputError(msg)
    deviations = M - np.expand_dims(means, axis)
    spread = np.sqrt((deviations**2).sum(axis=axis) / (n - 1))
    return spread / means


def _classify(backward: np.ndarray, forward: np.ndarray) -> tuple[SectorClass, ...]:
    classes: list[SectorClass] = []
    for bl, fl in zip(backward, forward):
        if bl > 1.0 and fl > 1.0:
            classes.append(SectorClass.KEY)
        elif bl > 1.0:
            classes.append(SectorClass.BACKWARD_ORIENTED)
        elif fl > 1.0:
            classes.append(SectorClass.FORWARD_ORIENTED)
        else:
            classes.append(SectorClass.WEAK)
    return tuple(classes)
