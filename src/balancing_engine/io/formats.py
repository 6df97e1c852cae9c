"""Data format helpers for grids and tabular result views."""

import json
from collections.abc import Sequence
from pathlib import Path

import numpy as np
import pandas as pd

from balancing_engine.core.schemas import Cell, CostBreakdown, RegulationEvent, SiteTotals

EVENT_COLUMNS = [
    "timestamp",
    "row_index",
    "site",
    "direction",
    "production",
    "forecast",
    "imbalance",
] + [name for name in CostBreakdown.model_fields if name not in ("direction", "imbalance_volume")]

SITE_TOTAL_COLUMNS = list(SiteTotals.model_fields)


def _to_cell(value) -> Cell:
    """Convert a DataFrame value to a plain grid cell."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    if isinstance(value, np.generic):
        value = value.item()
        if isinstance(value, float) and np.isnan(value):
            return None
    return value


def grid_from_frame(df: pd.DataFrame) -> list[list[Cell]]:
    """Convert a header-less DataFrame into a cell grid.

    The frame is expected to hold the raw sheet, header rows included
    (e.g. as returned by ``read_excel(..., header=None)``).

    Args:
        df: DataFrame with one row per sheet row

    Returns:
        Grid as a list of rows; missing values become None
    """
    values = df.astype(object).to_numpy()
    return [[_to_cell(value) for value in row] for row in values]


def read_json_grid(path: str) -> list[list[Cell]]:
    """Read a grid stored as a JSON array of row arrays.

    Args:
        path: Path to JSON file

    Returns:
        Grid as a list of rows
    """
    with open(path) as f:
        grid = json.load(f)

    if not isinstance(grid, list) or not all(isinstance(row, list) for row in grid):
        raise ValueError(f"Grid file must hold a JSON array of rows: {path}")

    return grid


def write_json_grid(grid: Sequence[Sequence[Cell]], path: str) -> None:
    """Write a grid as a JSON array of row arrays.

    Date cells are written as strings.

    Args:
        grid: Grid rows
        path: Output path
    """
    rows = [[_to_cell(cell) for cell in row] for row in grid]
    Path(path).write_text(json.dumps(rows, indent=1, default=str))


def events_to_frame(events: Sequence[RegulationEvent]) -> pd.DataFrame:
    """Flatten regulation events into one row per event.

    Args:
        events: Up and/or down regulation events

    Returns:
        DataFrame with EVENT_COLUMNS
    """
    rows = []
    for event in events:
        row = event.model_dump(exclude={"cost"})
        row.update(event.cost.model_dump(exclude={"direction", "imbalance_volume"}))
        rows.append(row)

    return pd.DataFrame(rows, columns=EVENT_COLUMNS)


def site_totals_to_frame(totals_by_site: dict[str, SiteTotals]) -> pd.DataFrame:
    """Tabulate site totals, one row per site.

    Args:
        totals_by_site: Mapping of site name to SiteTotals

    Returns:
        DataFrame indexed by site with SITE_TOTAL_COLUMNS
    """
    return pd.DataFrame(
        [totals.model_dump() for totals in totals_by_site.values()],
        index=pd.Index(list(totals_by_site), name="site"),
        columns=SITE_TOTAL_COLUMNS,
    )
