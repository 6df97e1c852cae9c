"""Header resolution: fixed column lookup and site group discovery.

The header spans two rows. Row 1 labels the fixed columns (timestamp, prices,
fee) and names each site; row 0 marks each site's column group:

    row 0:  ...  Produktion  Prognos  Enhet  ...
    row 1:  ...  <site>      ...      ...    ...

Fixed columns are expected at their default positions but are found anywhere
in row 1 if the sheet has been rearranged. Nothing here raises for a missing
label; the field is simply left unresolved.
"""

import logging
from collections.abc import Sequence

from balancing_engine.core.constants import (
    DEFAULT_COLUMN_POSITIONS,
    FIELD_NAMES,
    MARKER_FORECAST,
    MARKER_PRODUCTION,
    MARKER_UNIT,
)
from balancing_engine.core.schemas import Cell, ColumnSchema, SiteColumnGroup
from balancing_engine.core.validate import validate_header_grid

logger = logging.getLogger(__name__)


def _cell_text(cell: Cell) -> str:
    """Trimmed text of a header cell ("" for empty cells)."""
    if cell is None:
        return ""
    return str(cell).strip()


def _cell_at(row: Sequence[Cell], index: int) -> Cell:
    return row[index] if 0 <= index < len(row) else None


def find_column(header_row: Sequence[Cell], label: str, expected_index: int) -> int | None:
    """Locate a labelled column, preferring its expected position.

    Args:
        header_row: Header row holding the labels
        label: Exact label to look for (compared after trimming)
        expected_index: Position the label normally sits at

    Returns:
        Column index, or None if the label is nowhere in the row
    """
    if _cell_text(_cell_at(header_row, expected_index)) == label:
        return expected_index

    logger.warning(
        "Expected column '%s' at index %d, but found '%s'",
        label,
        expected_index,
        _cell_at(header_row, expected_index),
    )

    for index, cell in enumerate(header_row):
        if _cell_text(cell) == label:
            return index

    return None


def discover_site_groups(header_row0: Sequence[Cell], header_row1: Sequence[Cell]) -> list[SiteColumnGroup]:
    """Scan the marker row for production/forecast column pairs.

    Args:
        header_row0: Marker row
        header_row1: Label row carrying site names

    Returns:
        Site groups in left-to-right column order
    """
    groups = []

    for i in range(len(header_row0) - 1):
        # Markers are matched exactly, without trimming
        if header_row0[i] != MARKER_PRODUCTION or header_row0[i + 1] != MARKER_FORECAST:
            continue

        site_name = _cell_text(_cell_at(header_row1, i))

        # A marker label in the name row means the header is misaligned
        if not site_name or site_name == MARKER_PRODUCTION:
            logger.debug("Skipping site group at column %d without a usable name", i)
            continue

        unit_col = i + 2 if _cell_at(header_row0, i + 2) == MARKER_UNIT else None

        groups.append(
            SiteColumnGroup(
                site_name=site_name,
                production_col=i,
                forecast_col=i + 1,
                unit_col=unit_col,
            )
        )

    return groups


def resolve_schema(header_row0: Sequence[Cell], header_row1: Sequence[Cell]) -> ColumnSchema:
    """Resolve fixed column positions and site groups from the two header rows.

    Args:
        header_row0: Marker row (site group markers)
        header_row1: Label row (fixed column labels and site names)

    Returns:
        ColumnSchema with unresolved fields left as None
    """
    header_row0 = list(header_row0) if header_row0 is not None else []
    header_row1 = list(header_row1) if header_row1 is not None else []

    positions = {
        FIELD_NAMES[label]: find_column(header_row1, label, expected_index)
        for label, expected_index in DEFAULT_COLUMN_POSITIONS.items()
    }

    schema = ColumnSchema(
        **positions,
        site_groups=discover_site_groups(header_row0, header_row1),
    )

    for field in schema.unresolved_fields():
        logger.warning("Column for '%s' not found; field will be left unresolved", field)

    logger.debug("Column mapping result: %s", schema.model_dump())

    return schema


def resolve_header_grid(rows: Sequence[Sequence[Cell]]) -> ColumnSchema:
    """Resolve the schema from the leading rows of a grid.

    Args:
        rows: Grid rows; only the first two are read

    Returns:
        Resolved ColumnSchema

    Raises:
        MalformedSchemaError: If fewer than two header rows are supplied
    """
    validate_header_grid(rows)
    return resolve_schema(rows[0], rows[1])
