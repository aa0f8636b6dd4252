"""Output and satellite-account multipliers.

Output multipliers decompose the column sums of L:

    total[j]    = Σ_i L[i, j]
    direct[j]   = Σ_i A[i, j]
    indirect[j] = total[j] - direct[j]

Every satellite account (value added, employment, taxes, ...) goes through
the same algorithm, parameterised only by the component vector:

    requirements[i] = component[i] / p[i]
    generator       = diag(requirements) · L
    multiplier[j]   = Σ_i generator[i, j]
    indirect[j]     = multiplier[j] - requirements[j]
"""

from dataclasses import dataclass

import numpy as np

from ioengine.engine.errors import DimensionMismatchError
from ioengine.engine.matrix_view import as_square_matrix, as_vector, require_nonzero


@dataclass(frozen=True)
class OutputMultipliers:
    """Output multipliers per sector: total, direct and indirect effects."""

    total: np.ndarray
    direct: np.ndarray
    indirect: np.ndarray


@dataclass(frozen=True)
class SatelliteMultiplier:
    """Multiplier results for one satellite account."""

    name: str
    requirements: np.ndarray  # component_i / output_i
    generator: np.ndarray     # diag(requirements) · L
    multiplier: np.ndarray    # column sums of generator
    indirect: np.ndarray      # multiplier - requirements


def output_multiplier_total(leontief: object) -> np.ndarray:
    L = as_square_matrix(leontief, "Leontief inverse")
    return L.sum(axis=0)


def output_multiplier_direct(technical_coefficients: object) -> np.ndarray:
    A = as_square_matrix(technical_coefficients, "technical coefficients")
    return A.sum(axis=0)


def output_multiplier_indirect(leontief: object, technical_coefficients: object) -> np.ndarray:
    return output_multipliers(leontief, technical_coefficients).indirect


def output_multipliers(leontief: object, technical_coefficients: object) -> OutputMultipliers:
    """Decompose output multipliers into direct and indirect effects.

    Raises:
        DimensionMismatchError: If L and A differ in size.
    """
    L = as_square_matrix(leontief, "Leontief inverse")
    A = as_square_matrix(technical_coefficients, "technical coefficients")
    if L.shape != A.shape:
        msg = f"dimension mismatch: Leontief inverse is {L.shape} but technical coefficients are {A.shape}."
        raise DimensionMismatchError(msg)

    total = L.sum(axis=0)
    direct = A.sum(axis=0)
    return OutputMultipliers(total=total, direct=direct, indirect=total - direct)


def requirements(component: object, production: object) -> np.ndarray:
    """Component per unit of output, sector by sector."""
    n = np.asarray(component).size
    c = as_vector(component, n, "component")
    p = as_vector(production, n, "production")
    require_nonzero(p, "production")
    return c / p


def generator_matrix(requirements_vector: object, leontief: object) -> np.ndarray:
    """diag(requirements) · L, without materialising the diagonal matrix."""
    L = as_square_matrix(leontief, "Leontief inverse")
    r = as_vector(requirements_vector, L.shape[0], "requirements")
    return r[:, np.newaxis] * L


def satellite_multiplier(
    component: object,
    production: object,
    leontief: object,
    name: str = "satellite",
) -> SatelliteMultiplier:
    """Requirements, generator, multiplier and indirect effect of one account.

    Raises:
        DimensionMismatchError: If component, production and L disagree on n.
        DegenerateInputError: If any production entry is zero.
    """
    L = as_square_matrix(leontief, "Leontief inverse")
    n = L.shape[0]
    p = as_vector(production, n, "production")
    c = as_vector(component, n, name)
    require_nonzero(p, "production")

    req = c / p
    generator = req[:, np.newaxis] * L
    multiplier = generator.sum(axis=0)
    return SatelliteMultiplier(
        name=name,
        requirements=req,
        generator=generator,
        multiplier=multiplier,
        indirect=multiplier - req,
    )


def value_added_multiplier(
    value_added: object, production: object, leontief: object,
) -> SatelliteMultiplier:
    return satellite_multiplier(value_added, production, leontief, name="value_added")


def employment_multiplier(
    employment: object, production: object, leontief: object,
) -> SatelliteMultiplier:
    return satellite_multiplier(employment, production, leontief, name="employment")
