"""Imbalance classification per site and interval."""

from collections.abc import Iterable
from typing import Optional

from balancing_engine.core.constants import DIRECTION_DOWN, DIRECTION_UP
from balancing_engine.core.schemas import (
    CalculationConfig,
    MeasurementRecord,
    RegulationEvent,
    RowClassification,
)
from balancing_engine.settlement.costs import down_regulation_cost, up_regulation_cost


def classify_record(
    record: MeasurementRecord,
    row_index: int = 0,
    config: Optional[CalculationConfig] = None,
) -> RowClassification:
    """Classify every site in a record as up, down, or balanced.

    Overproduction (production > forecast) is down regulation, underproduction
    is up regulation. Balanced sites and sites without a valid price produce
    no event.

    Args:
        record: Normalized measurement record
        row_index: Position of the record among the normalized records
        config: Calculation configuration

    Returns:
        RowClassification with up and down events in site order
    """
    config = config or CalculationConfig()
    result = RowClassification()

    for site_name, reading in record.sites.items():
        imbalance = reading.production - reading.forecast

        if imbalance > 0:
            direction = DIRECTION_DOWN
            volume = imbalance
            cost = down_regulation_cost(volume, record, config)
        elif imbalance < 0:
            direction = DIRECTION_UP
            volume = -imbalance
            cost = up_regulation_cost(volume, record, config)
        else:
            continue

        if cost is None:
            continue

        event = RegulationEvent(
            site=site_name,
            row_index=row_index,
            timestamp=record.timestamp,
            production=reading.production,
            forecast=reading.forecast,
            imbalance=volume,
            direction=direction,
            cost=cost,
        )

        if direction == DIRECTION_UP:
            result.up.append(event)
        else:
            result.down.append(event)

    return result


def classify_records(
    records: Iterable[MeasurementRecord],
    config: Optional[CalculationConfig] = None,
) -> tuple[list[RegulationEvent], list[RegulationEvent]]:
    """Classify a sequence of records.

    Args:
        records: Normalized records, in time order
        config: Calculation configuration

    Returns:
        Tuple of (up_events, down_events)
    """
    config = config or CalculationConfig()
    up_events = []
    down_events = []

    for row_index, record in enumerate(records):
        row = classify_record(record, row_index, config)
        up_events.extend(row.up)
        down_events.extend(row.down)

    return up_events, down_events
