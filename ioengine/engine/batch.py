"""Structural analysis runner.

Chains the engine stages for one transactions table:

    T, p -> A, F -> L, G -> linkages, multipliers, extraction, influence

Stateless: every run recomputes from the request and nothing is cached
between calls. Extraction runs when both final demand and value added are
supplied; field of influence is opt-in because of its O(n⁵) cost.
"""

import logging
import time
from dataclasses import dataclass, field

import numpy as np

from ioengine.engine.coefficients import allocation_coefficients, technical_coefficients
from ioengine.engine.errors import DimensionMismatchError
from ioengine.engine.execution import ExecutionContext
from ioengine.engine.extraction import ExtractionResult, account_matrix, extraction_analysis
from ioengine.engine.influence import field_of_influence, resolve_epsilon
from ioengine.engine.inverse import InverseMethod, check_method, ghosh_inverse, leontief_inverse
from ioengine.engine.linkages import LinkageProfile, linkage_profile
from ioengine.engine.matrix_view import as_square_matrix, as_vector
from ioengine.engine.multipliers import (
    OutputMultipliers,
    SatelliteMultiplier,
    output_multipliers,
    satellite_multiplier,
)

logger = logging.getLogger(__name__)


@dataclass
class StructuralAnalysisRequest:
    """Input for one run: the table plus optional auxiliary accounts."""

    transactions: np.ndarray
    production: np.ndarray
    sector_codes: list[str] | None = None
    final_demand: np.ndarray | None = None
    value_added: np.ndarray | None = None
    satellite_accounts: dict[str, np.ndarray] = field(default_factory=dict)
    influence_epsilon: float | None = None
    compute_influence: bool = False
    method: InverseMethod = "lu"


@dataclass(frozen=True)
class StructuralReport:
    """Everything computed for one table."""

    sector_codes: list[str]
    technical_coefficients: np.ndarray
    allocation_coefficients: np.ndarray
    leontief_inverse: np.ndarray
    ghosh_inverse: np.ndarray
    leontief_linkages: LinkageProfile
    ghosh_linkages: LinkageProfile
    output_multipliers: OutputMultipliers
    satellite_multipliers: dict[str, SatelliteMultiplier]
    extraction: ExtractionResult | None
    field_of_influence: np.ndarray | None

    def to_sector_dict(self, vec: np.ndarray) -> dict[str, float]:
        """Convert a per-sector vector to a sector-code-keyed dict."""
        return {code: float(vec[i]) for i, code in enumerate(self.sector_codes)}


class StructuralAnalysisRunner:
    """Runs every configured analysis for a request on one execution context."""

    def __init__(self, context: ExecutionContext | None = None) -> None:
        self._context = context

    def run(self, request: StructuralAnalysisRequest) -> StructuralReport:
        """Execute the full pipeline.

        Raises:
            DimensionMismatchError: If sector_codes or any account has the wrong size.
            DegenerateInputError: If production has a zero entry, or influence
                is requested with a zero or non-finite epsilon.
            ValueError: If the inverse method is unknown.
            SingularMatrixError: If I - A or I - F cannot be inverted.
        """
        start = time.perf_counter()
        T = as_square_matrix(request.transactions, "transactions")
        n = T.shape[0]
        sector_codes = self._sector_codes(request.sector_codes, n)
        # Shapes, method and epsilon are checked before any factorisation.
        for name, component in request.satellite_accounts.items():
            as_vector(component, n, name)
        if request.final_demand is not None:
            account_matrix(request.final_demand, n, "final demand", sectors_on="rows")
        if request.value_added is not None:
            account_matrix(request.value_added, n, "value added", sectors_on="columns")
        check_method(request.method)
        epsilon = resolve_epsilon(request.influence_epsilon) if request.compute_influence else None

        A = technical_coefficients(T, request.production)
        F = allocation_coefficients(T, request.production)
        L = leontief_inverse(A)
        G = ghosh_inverse(F)
        leontief_linkages = linkage_profile(L)
        ghosh_linkages = linkage_profile(G)

        satellites = {
            name: satellite_multiplier(component, request.production, L, name=name)
            for name, component in request.satellite_accounts.items()
        }

        extraction = None
        if request.final_demand is not None and request.value_added is not None:
            extraction = extraction_analysis(
                A, F, request.final_demand, request.value_added, request.production,
                context=self._context, method=request.method,
            )

        influence = None
        if request.compute_influence:
            influence = field_of_influence(
                A, L, epsilon,
                context=self._context, method=request.method,
            )

        logger.info(
            "Structural analysis of %d sectors finished in %.1f ms",
            n, (time.perf_counter() - start) * 1000,
        )
        return StructuralReport(
            sector_codes=sector_codes,
            technical_coefficients=A,
            allocation_coefficients=F,
            leontief_inverse=L,
            ghosh_inverse=G,
            leontief_linkages=leontief_linkages,
            ghosh_linkages=ghosh_linkages,
            output_multipliers=output_multipliers(L, A),
            satellite_multipliers=satellites,
            extraction=extraction,
            field_of_influence=influence,
        )

    @staticmethod
    def _sector_codes(codes: list[str] | None, n: int) -> list[str]:
        if codes is None:
            return [f"S{i}" for i in range(n)]
        if len(codes) != n:
            msg = f"dimension mismatch: sector_codes has {len(codes)} entries, table has {n} sectors."
            raise DimensionMismatchError(msg)
        return list(codes)
