"""Standalone structural analysis of an IO table.

Loads a table from JSON, prints productivity diagnostics, linkages and
multipliers.

Usage:
    python -m scripts.validate_model table.json
    python -m scripts.validate_model --threads 4 --extraction table.json

JSON fields: ``Z`` (n x n transactions), ``x`` (production), optional
``sector_codes``, ``final_demand`` (n x k), ``value_added`` (k x n) and
``employment`` (n).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import numpy as np

from ioengine.config.logging_config import configure_logging, get_logger
from ioengine.engine.batch import (
    StructuralAnalysisRequest,
    StructuralAnalysisRunner,
    StructuralReport,
)
from ioengine.engine.diagnostics import ProductivityReport, check_productivity
from ioengine.engine.execution import configure_pool, get_execution_context

logger = get_logger("validate_model")


def _load_table(path: Path) -> dict[str, object]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    for key in ("Z", "x"):
        if key not in data:
            msg = f"Missing '{key}' in {path.name}"
            raise ValueError(msg)
    return data


def _print_validation(report: ProductivityReport) -> None:
    print()
    print(f"  Spectral radius: {report.spectral_radius:.6f}", end="")
    print("  < 1.0  PASS" if report.spectral_radius < 1.0 else "  >= 1.0  FAIL")
    print(f"  T non-negative:  {'PASS' if report.all_t_nonnegative else 'FAIL'}")
    print(f"  p positive:      {'PASS' if report.all_p_positive else 'FAIL'}")
    print(f"  VA positive:     {'PASS' if report.all_va_positive else 'FAIL'}")
    print(f"  L non-negative:  {'PASS' if report.l_nonnegative else 'FAIL'}")


def _print_sector_table(report: StructuralReport, sector_codes: list[str]) -> None:
    links = report.leontief_linkages
    mult = report.output_multipliers
    print()
    print(
        f"  {'Sector':<8} {'Backward':>9} {'Forward':>9} {'Multiplier':>11}"
        f" {'Indirect':>9}  {'Class':<18}"
    )
    for i, code in enumerate(sector_codes):
        print(
            f"  {code:<8} {links.backward_linkages[i]:>9.4f} {links.forward_linkages[i]:>9.4f}"
            f" {mult.total[i]:>11.4f} {mult.indirect[i]:>9.4f}  {links.sector_classes[i]:<18}"
        )
    if report.extraction is not None:
        print()
        print(f"  {'Sector':<8} {'Backward %':>11} {'Forward %':>11} {'Total %':>11}")
        for i, code in enumerate(sector_codes):
            print(
                f"  {code:<8} {report.extraction.backward[i, 1]:>11.2%}"
                f" {report.extraction.forward[i, 1]:>11.2%}"
                f" {report.extraction.total[i, 1]:>11.2%}"
            )


def main() -> None:
    """Run the analysis."""
    parser = argparse.ArgumentParser(description="Structural analysis of an IO table JSON file")
    parser.add_argument("table_path", type=Path, help="Path to IO table JSON")
    parser.add_argument("--threads", type=int, default=0, help="Worker threads (0 = all CPUs)")
    parser.add_argument(
        "--extraction", action="store_true",
        help="Run hypothetical extraction (needs final_demand and value_added)",
    )
    args = parser.parse_args()

    configure_logging()
    configure_pool(args.threads)

    data = _load_table(args.table_path)
    T = np.array(data["Z"], dtype=np.float64)
    x = np.array(data["x"], dtype=np.float64)
    sector_codes = data.get("sector_codes") or [f"S{i}" for i in range(len(x))]

    diagnostics = check_productivity(T, x, sector_codes)
    print("=" * 60)
    print(f"  Structural analysis: {args.table_path.name}")
    print(f"  Sectors: {len(x)}")
    print("=" * 60)
    _print_validation(diagnostics)

    if diagnostics.is_valid:
        satellites = {}
        if "employment" in data:
            satellites["employment"] = np.array(data["employment"], dtype=np.float64)
        request = StructuralAnalysisRequest(
            transactions=T,
            production=x,
            sector_codes=sector_codes,
            final_demand=np.array(data["final_demand"]) if args.extraction and "final_demand" in data else None,
            value_added=np.array(data["value_added"]) if args.extraction and "value_added" in data else None,
            satellite_accounts=satellites,
        )
        report = StructuralAnalysisRunner(get_execution_context()).run(request)
        _print_sector_table(report, sector_codes)
        logger.info("analysis complete", sectors=len(x))

    for w in diagnostics.warnings:
        print(f"    - {w}")
    for e in diagnostics.errors:
        print(f"    ! {e}")

    print()
    print("=" * 60)
    if diagnostics.is_valid:
        print("  RESULT: PASS")
        sys.exit(0)
    print(f"  RESULT: FAIL ({len(diagnostics.errors)} errors)")
    sys.exit(1)


if __name__ == "__main__":
    main()
