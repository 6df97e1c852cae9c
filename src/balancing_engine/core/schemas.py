"""Pydantic schemas for configuration, parsed records, and calculation results."""

from datetime import date, datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from balancing_engine.core.constants import (
    DEFAULT_UNIT,
    FIELD_NAMES,
    MAX_REGULATION_PRICE,
    MIN_REGULATION_PRICE,
    PRICE_SCALE,
)

# A single decoded spreadsheet cell
Cell = Union[str, int, float, datetime, date, None]

Direction = Literal["up", "down"]


class CalculationConfig(BaseModel):
    """Pricing conventions and aggregation options."""

    price_scale: float = Field(default=PRICE_SCALE, gt=0, description="Minor units per major currency unit")
    min_regulation_price: float = Field(default=MIN_REGULATION_PRICE, description="Lowest accepted regulation price (minor units)")
    max_regulation_price: float = Field(default=MAX_REGULATION_PRICE, description="Highest accepted regulation price (minor units)")
    default_unit: str = Field(default=DEFAULT_UNIT, min_length=1, description="Unit used when a site has no unit column")
    track_late_sites: bool = Field(
        default=False,
        description="Seed site totals from every record instead of only the first one",
    )

    @field_validator("max_regulation_price")
    @classmethod
    def validate_price_band(cls, v: float, info) -> float:
        """Ensure the accepted regulation price band is not empty."""
        low = info.data.get("min_regulation_price")
        if low is not None and v <= low:
            raise ValueError(f"max_regulation_price {v} must exceed min_regulation_price {low}")
        return v


class SiteColumnGroup(BaseModel):
    """Column positions of one production site discovered in the header."""

    site_name: str = Field(..., min_length=1)
    production_col: int = Field(..., ge=0)
    forecast_col: int = Field(..., ge=0)
    unit_col: Optional[int] = Field(default=None, ge=0)


class ColumnSchema(BaseModel):
    """Resolved column positions for a single dataset.

    Each fixed field is None when its label could not be located.
    """

    timestamp: Optional[int] = None
    minute_of_interval: Optional[int] = None
    spot_price_a: Optional[int] = None
    spot_price_b: Optional[int] = None
    regulation_price_a: Optional[int] = None
    regulation_price_b: Optional[int] = None
    balancing_fee: Optional[int] = None
    site_groups: list[SiteColumnGroup] = Field(default_factory=list)

    def unresolved_fields(self) -> list[str]:
        """Names of fixed fields without a column position."""
        return [name for name in FIELD_NAMES.values() if getattr(self, name) is None]

    @property
    def site_names(self) -> list[str]:
        return [group.site_name for group in self.site_groups]


class SiteReading(BaseModel):
    """Production and forecast for one site in one interval."""

    production: float = 0.0
    forecast: float = 0.0
    unit: str = DEFAULT_UNIT


class MeasurementRecord(BaseModel):
    """One normalized data row.

    Prices are in minor units as supplied. A price is None only when its
    column was never resolved; unparsable cells read as 0.0.
    """

    timestamp: Optional[datetime] = None
    minute_of_interval: float = 0.0
    spot_price_a: Optional[float] = None
    spot_price_b: Optional[float] = None
    regulation_price_a: Optional[float] = None
    regulation_price_b: Optional[float] = None
    balancing_fee: float = 0.0
    sites: dict[str, SiteReading] = Field(default_factory=dict)


class CostBreakdown(BaseModel):
    """Cost detail for one imbalance event.

    *_raw fields keep the minor-unit price as supplied; the rest are major units.
    """

    direction: Direction
    imbalance_volume: float = Field(..., gt=0)
    regulation_price: float
    spot_price: float
    regulation_price_raw: float
    spot_price_raw: float
    price_difference: float = Field(..., ge=0)
    balancing_fee: float
    balancing_fee_raw: float
    total_cost: float
    net_result: float
    cost_per_unit: float

    # Up regulation only
    actual_cost: Optional[float] = None
    spot_cost: Optional[float] = None

    # Down regulation only
    actual_revenue: Optional[float] = None
    spot_revenue: Optional[float] = None


class RegulationEvent(BaseModel):
    """An up or down regulation event for one site in one interval."""

    site: str
    row_index: int = Field(..., ge=0, description="Position among the normalized records")
    timestamp: Optional[datetime] = None
    production: float
    forecast: float
    imbalance: float = Field(..., gt=0, description="Absolute imbalance volume")
    direction: Direction
    cost: CostBreakdown


class RowClassification(BaseModel):
    """Regulation events produced by a single record."""

    up: list[RegulationEvent] = Field(default_factory=list)
    down: list[RegulationEvent] = Field(default_factory=list)


class SiteTotals(BaseModel):
    """Accumulated regulation cost and volume for one site."""

    up_regulation_cost: float = 0.0
    down_regulation_cost: float = 0.0
    total_cost: float = 0.0
    up_regulation_volume: float = 0.0
    down_regulation_volume: float = 0.0


class Summary(BaseModel):
    """Portfolio-wide regulation statistics."""

    total_up_regulation_cost: float = 0.0
    total_down_regulation_cost: float = 0.0
    total_cost: float = 0.0
    total_up_volume: float = 0.0
    total_down_volume: float = 0.0
    avg_up_cost_per_unit: float = 0.0
    avg_down_cost_per_unit: float = 0.0
    number_of_up_regulations: int = Field(default=0, ge=0)
    number_of_down_regulations: int = Field(default=0, ge=0)


class AggregateResult(BaseModel):
    """Output of the aggregation step."""

    summary: Summary = Field(default_factory=Summary)
    totals_by_site: dict[str, SiteTotals] = Field(default_factory=dict)


class BalancingResult(BaseModel):
    """Full result of a balancing cost calculation."""

    up_regulation: list[RegulationEvent] = Field(default_factory=list)
    down_regulation: list[RegulationEvent] = Field(default_factory=list)
    totals_by_site: dict[str, SiteTotals] = Field(default_factory=dict)
    summary: Summary = Field(default_factory=Summary)


class BundleMetadata(BaseModel):
    """Metadata for reproducibility tracking."""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    engine_version: str
    num_records: int = Field(default=0, ge=0)
    site_names: list[str] = Field(default_factory=list)
    unresolved_fields: list[str] = Field(default_factory=list)
