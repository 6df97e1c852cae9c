"""Price selection across bidding zones.

Zone A (SE3) is the primary price source and zone B (SE4) the fallback. A
candidate that fails its sanity check is skipped; if both fail there is no
price and the imbalance event is not costed.
"""

from typing import Optional

from balancing_engine.core.schemas import CalculationConfig, MeasurementRecord


def is_valid_regulation_price(price: Optional[float], config: CalculationConfig) -> bool:
    """Check a regulation price against the accepted band (minor units, inclusive)."""
    return price is not None and config.min_regulation_price <= price <= config.max_regulation_price


def is_valid_spot_price(price: Optional[float]) -> bool:
    """Spot prices must be strictly positive."""
    return price is not None and price > 0


def select_regulation_price(
    record: MeasurementRecord, config: Optional[CalculationConfig] = None
) -> Optional[float]:
    """Pick the regulation price for a record.

    Args:
        record: Normalized measurement record
        config: Calculation configuration (accepted price band)

    Returns:
        Regulation price in minor units, or None if neither zone is usable
    """
    config = config or CalculationConfig()

    for price in (record.regulation_price_a, record.regulation_price_b):
        if is_valid_regulation_price(price, config):
            return price

    return None


def select_spot_price(record: MeasurementRecord) -> Optional[float]:
    """Pick the spot price for a record.

    Args:
        record: Normalized measurement record

    Returns:
        Spot price in minor units, or None if neither zone is positive
    """
    for price in (record.spot_price_a, record.spot_price_b):
        if is_valid_spot_price(price):
            return price

    return None


def to_major_units(price: float, config: Optional[CalculationConfig] = None) -> float:
    """Convert a minor-unit price (öre) to major units (SEK)."""
    config = config or CalculationConfig()
    return price / config.price_scale
