"""Aggregation of regulation events into site totals and a portfolio summary."""

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Optional

from balancing_engine.core.schemas import (
    AggregateResult,
    CalculationConfig,
    MeasurementRecord,
    RegulationEvent,
    SiteTotals,
    Summary,
)

logger = logging.getLogger(__name__)


def _exact_sum(values: list[float]) -> float:
    """Exactly rounded sum that degrades to inf/nan instead of raising.

    fsum raises when the exact sum leaves the float range or when inf and
    -inf meet. The sorted fallback still ignores input order.
    """
    try:
        return math.fsum(values)
    except (OverflowError, ValueError):
        return sum(sorted(values))


def _average(total: float, volume: float) -> float:
    return total / volume if volume > 0 else 0.0


def seed_site_names(records: Sequence[MeasurementRecord], track_late_sites: bool = False) -> list[str]:
    """Site names that receive totals.

    By default only the sites present in the first record are tracked, so a
    site that first appears later gets no totals. With track_late_sites the
    union over all records is used, in order of first appearance.

    Args:
        records: Normalized records
        track_late_sites: Seed from every record instead of the first

    Returns:
        Ordered list of site names
    """
    if not records:
        return []

    if not track_late_sites:
        return list(records[0].sites)

    names: dict[str, None] = {}
    for record in records:
        names.update(dict.fromkeys(record.sites))
    return list(names)


def compute_site_totals(
    up_events: Iterable[RegulationEvent],
    down_events: Iterable[RegulationEvent],
    site_names: Iterable[str],
) -> dict[str, SiteTotals]:
    """Sum regulation cost and volume per site.

    Args:
        up_events: Up regulation events
        down_events: Down regulation events
        site_names: Sites to report; events for other sites are skipped

    Returns:
        Mapping of site name to SiteTotals
    """
    tracked = {name: {"up_cost": [], "down_cost": [], "up_volume": [], "down_volume": []} for name in site_names}
    skipped = 0

    for prefix, events in (("up", up_events), ("down", down_events)):
        for event in events:
            parts = tracked.get(event.site)
            if parts is None:
                skipped += 1
                continue
            parts[f"{prefix}_cost"].append(event.cost.total_cost)
            parts[f"{prefix}_volume"].append(event.imbalance)

    if skipped:
        logger.debug("Skipped %d events for sites without totals", skipped)

    totals = {}
    for name, parts in tracked.items():
        up_cost = _exact_sum(parts["up_cost"])
        down_cost = _exact_sum(parts["down_cost"])
        totals[name] = SiteTotals(
            up_regulation_cost=up_cost,
            down_regulation_cost=down_cost,
            total_cost=up_cost + down_cost,
            up_regulation_volume=_exact_sum(parts["up_volume"]),
            down_regulation_volume=_exact_sum(parts["down_volume"]),
        )

    return totals


def compute_summary(
    up_events: Sequence[RegulationEvent],
    down_events: Sequence[RegulationEvent],
) -> Summary:
    """Compute portfolio-wide regulation statistics.

    Sums are exactly rounded (math.fsum), so the result does not depend on
    event order.

    Args:
        up_events: Up regulation events
        down_events: Down regulation events

    Returns:
        Summary with totals, counts, and volume-weighted cost per unit
    """
    total_up_cost = _exact_sum([event.cost.total_cost for event in up_events])
    total_down_cost = _exact_sum([event.cost.total_cost for event in down_events])

    total_up_volume = _exact_sum([event.imbalance for event in up_events])
    total_down_volume = _exact_sum([event.imbalance for event in down_events])

    return Summary(
        total_up_regulation_cost=total_up_cost,
        total_down_regulation_cost=total_down_cost,
        total_cost=total_up_cost + total_down_cost,
        total_up_volume=total_up_volume,
        total_down_volume=total_down_volume,
        avg_up_cost_per_unit=_average(total_up_cost, total_up_volume),
        avg_down_cost_per_unit=_average(total_down_cost, total_down_volume),
        number_of_up_regulations=len(up_events),
        number_of_down_regulations=len(down_events),
    )


def aggregate(
    up_events: Sequence[RegulationEvent],
    down_events: Sequence[RegulationEvent],
    records: Sequence[MeasurementRecord],
    config: Optional[CalculationConfig] = None,
) -> AggregateResult:
    """Reduce regulation events into a summary and per-site totals.

    Args:
        up_events: All up regulation events
        down_events: All down regulation events
        records: Normalized records, used to discover which sites to track
        config: Calculation configuration

    Returns:
        AggregateResult with summary and totals_by_site
    """
    config = config or CalculationConfig()
    site_names = seed_site_names(records, config.track_late_sites)

    return AggregateResult(
        summary=compute_summary(up_events, down_events),
        totals_by_site=compute_site_totals(up_events, down_events, site_names),
    )
