"""Row normalization: raw grid rows to typed measurement records.

Parsing is best-effort. A bad numeric cell reads as 0.0 and the row survives;
only rows without a usable timestamp are dropped, since they cannot be placed
in time.
"""

import logging
import math
import numbers
from collections.abc import Iterable, Iterator, Sequence
from datetime import date, datetime, time, timedelta
from typing import Optional

import pandas as pd

from balancing_engine.core.constants import DEFAULT_UNIT, SECONDS_PER_DAY, SPREADSHEET_EPOCH
from balancing_engine.core.schemas import (
    CalculationConfig,
    Cell,
    ColumnSchema,
    MeasurementRecord,
    SiteColumnGroup,
    SiteReading,
)

logger = logging.getLogger(__name__)

RELATIVE_DATE_WORDS = frozenset({"now", "today"})


def _cell_at(row: Sequence[Cell], index: Optional[int]) -> Cell:
    if index is None or index < 0 or index >= len(row):
        return None
    return row[index]


def _is_number(cell: Cell) -> bool:
    # bool is an int subclass but never a measurement
    return isinstance(cell, numbers.Real) and not isinstance(cell, bool)


def _text_to_float(text: str) -> float:
    # float() also takes Python literal underscores ("1_000"); sheet text never does
    if "_" in text:
        raise ValueError(f"Not a number: {text!r}")
    return float(text)


def parse_number(cell: Cell) -> float:
    """Parse a cell as a float, degrading to 0.0.

    Empty cells, non-numeric text, booleans, dates, NaN and infinities all
    read as 0.0. Text with digit-group underscores ("1_000") is rejected.
    Unicode decimal digits (e.g. Arabic-Indic) are accepted, as float() does.
    """
    if _is_number(cell):
        value = float(cell)
    elif isinstance(cell, str):
        try:
            value = _text_to_float(cell.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0

    return value if math.isfinite(value) else 0.0


def serial_to_datetime(serial: float) -> Optional[datetime]:
    """Convert a spreadsheet serial day count to a datetime.

    Args:
        serial: Days since 1899-12-30, fractional part is the time of day

    Returns:
        Naive datetime, or None if the serial is not finite or out of range
    """
    if not math.isfinite(serial):
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(seconds=serial * SECONDS_PER_DAY)
    except OverflowError:
        return None


def parse_timestamp(cell: Cell) -> Optional[datetime]:
    """Resolve a timestamp cell.

    Numbers are spreadsheet serial dates. Date values pass through (a bare
    date becomes midnight). Text is tried as a serial number and then as a
    date string. Relative words such as "now" are not dates. Anything else
    is None.
    """
    # NaT is a datetime instance, so it must be caught before the date checks
    if isinstance(cell, bool) or cell is None or cell is pd.NaT:
        return None

    if isinstance(cell, pd.Timestamp):
        return None if pd.isna(cell) else cell.to_pydatetime()

    if isinstance(cell, datetime):
        return cell

    if isinstance(cell, date):
        return datetime.combine(cell, time())

    if _is_number(cell):
        return serial_to_datetime(float(cell))

    if isinstance(cell, str):
        text = cell.strip()
        if not text:
            return None

        try:
            return serial_to_datetime(_text_to_float(text))
        except ValueError:
            pass

        # pandas resolves these against the wall clock
        if text.lower() in RELATIVE_DATE_WORDS:
            return None

        parsed = pd.to_datetime(text, errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.to_pydatetime()

    return None


def _parse_unit(row: Sequence[Cell], group: SiteColumnGroup, default_unit: str) -> str:
    if group.unit_col is None:
        return default_unit

    cell = _cell_at(row, group.unit_col)
    if cell is None:
        return default_unit

    unit = str(cell).strip()
    return unit or default_unit


def _parse_price(row: Sequence[Cell], index: Optional[int]) -> Optional[float]:
    # None marks a column that was never resolved
    if index is None:
        return None
    return parse_number(_cell_at(row, index))


def normalize_row(
    row: Sequence[Cell],
    schema: ColumnSchema,
    default_unit: str = DEFAULT_UNIT,
) -> MeasurementRecord:
    """Map one raw row onto a MeasurementRecord.

    Args:
        row: Raw data row aligned to the header columns
        schema: Resolved column schema
        default_unit: Unit for sites without a unit column

    Returns:
        MeasurementRecord, possibly with a None timestamp
    """
    if row is None:
        row = []

    sites = {
        group.site_name: SiteReading(
            production=parse_number(_cell_at(row, group.production_col)),
            forecast=parse_number(_cell_at(row, group.forecast_col)),
            unit=_parse_unit(row, group, default_unit),
        )
        for group in schema.site_groups
    }

    return MeasurementRecord(
        timestamp=parse_timestamp(_cell_at(row, schema.timestamp)),
        minute_of_interval=parse_number(_cell_at(row, schema.minute_of_interval)),
        spot_price_a=_parse_price(row, schema.spot_price_a),
        spot_price_b=_parse_price(row, schema.spot_price_b),
        regulation_price_a=_parse_price(row, schema.regulation_price_a),
        regulation_price_b=_parse_price(row, schema.regulation_price_b),
        balancing_fee=parse_number(_cell_at(row, schema.balancing_fee)),
        sites=sites,
    )


def normalize_rows(
    data_rows: Iterable[Sequence[Cell]],
    schema: ColumnSchema,
    config: Optional[CalculationConfig] = None,
) -> Iterator[MeasurementRecord]:
    """Lazily normalize data rows, dropping rows without a timestamp.

    Args:
        data_rows: Raw rows following the two header rows
        schema: Resolved column schema
        config: Calculation configuration (default unit)

    Yields:
        MeasurementRecord for every row with a usable timestamp, in input order
    """
    default_unit = config.default_unit if config is not None else DEFAULT_UNIT
    dropped = 0

    for row in data_rows:
        record = normalize_row(row, schema, default_unit)
        if record.timestamp is None:
            dropped += 1
            continue
        yield record

    if dropped:
        logger.debug("Dropped %d rows without a usable timestamp", dropped)
