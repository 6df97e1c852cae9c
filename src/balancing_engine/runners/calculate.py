"""Balancing cost calculation runner.

The pipeline is resolve -> normalize -> classify -> aggregate, run once over
a fully decoded grid (two header rows followed by data rows).
"""

from collections.abc import Sequence
from typing import Optional

from balancing_engine.core.constants import HEADER_ROW_COUNT
from balancing_engine.core.metrics import aggregate
from balancing_engine.core.schemas import BalancingResult, CalculationConfig, Cell, MeasurementRecord
from balancing_engine.core.validate import validate_balancing_result
from balancing_engine.io.bundle import load_bundle, write_results
from balancing_engine.parsing.normalize import normalize_rows
from balancing_engine.parsing.resolve import resolve_header_grid
from balancing_engine.settlement.classify import classify_records


def calculate_balancing_costs(
    grid: Sequence[Sequence[Cell]], config: Optional[CalculationConfig] = None
) -> BalancingResult:
    """Compute up/down regulation costs for a decoded grid.

    Args:
        grid: Header row 0, header row 1, then data rows
        config: Calculation configuration

    Returns:
        BalancingResult with events, site totals, and summary

    Raises:
        MalformedSchemaError: If the grid has fewer than two header rows
    """
    config = config or CalculationConfig()

    schema = resolve_header_grid(grid)
    records = list(normalize_rows(grid[HEADER_ROW_COUNT:], schema, config))

    return build_result(records, config)


def build_result(
    records: Sequence[MeasurementRecord], config: Optional[CalculationConfig] = None
) -> BalancingResult:
    """Classify and aggregate normalized records.

    Args:
        records: Normalized records, in time order
        config: Calculation configuration

    Returns:
        BalancingResult
    """
    config = config or CalculationConfig()

    up_events, down_events = classify_records(records, config)
    aggregated = aggregate(up_events, down_events, records, config)

    return BalancingResult(
        up_regulation=up_events,
        down_regulation=down_events,
        totals_by_site=aggregated.totals_by_site,
        summary=aggregated.summary,
    )


def run_calculation(bundle_path: str) -> BalancingResult:
    """Run the calculation on a bundle and write results back into it.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        BalancingResult
    """
    print(f"Loading bundle from {bundle_path}...")
    config, grid = load_bundle(bundle_path)

    schema = resolve_header_grid(grid)
    records = list(normalize_rows(grid[HEADER_ROW_COUNT:], schema, config))

    print(f"Sites: {', '.join(schema.site_names) or '(none)'}")
    print(f"Records: {len(records)} of {len(grid) - HEADER_ROW_COUNT} data rows kept")
    if schema.unresolved_fields():
        print(f"Unresolved columns: {', '.join(schema.unresolved_fields())}")

    print("Classifying imbalances...")
    result = build_result(records, config)

    validate_balancing_result(result)
    print("✓ Result validation passed")

    print(
        f"Up regulations: {result.summary.number_of_up_regulations}, "
        f"down regulations: {result.summary.number_of_down_regulations}"
    )
    print(f"Total cost: {result.summary.total_cost:.2f} SEK")

    write_results(bundle_path, result, schema=schema, num_records=len(records))
    print(f"Results written to {bundle_path}")

    return result
