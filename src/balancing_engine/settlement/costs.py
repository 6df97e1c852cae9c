"""Imbalance cost formulas for up and down regulation.

UP REGULATION (production < forecast, shortfall bought at regulation price):
    price_difference = max(0, regulation - spot)
    total_cost       = volume * (price_difference + fee)
    actual_cost      = volume * (regulation + fee)
    spot_cost        = volume * spot
    net_result       = spot_cost - actual_cost

DOWN REGULATION (production > forecast, surplus sold at regulation price):
    price_difference = max(0, spot - regulation)
    total_cost       = volume * (price_difference + fee)
    actual_revenue   = volume * regulation - volume * fee
    spot_revenue     = volume * spot
    net_result       = actual_revenue - spot_revenue

In both directions cost_per_unit = price_difference + fee. All prices are
converted to major units before use.
"""

from typing import Optional

from balancing_engine.core.constants import DIRECTION_DOWN, DIRECTION_UP
from balancing_engine.core.schemas import CalculationConfig, CostBreakdown, MeasurementRecord
from balancing_engine.settlement.prices import select_regulation_price, select_spot_price, to_major_units


def _select_prices(
    record: MeasurementRecord, config: CalculationConfig
) -> Optional[tuple[float, float, float]]:
    """Raw (regulation, spot, fee) prices, or None if a price is unusable."""
    regulation_raw = select_regulation_price(record, config)
    spot_raw = select_spot_price(record)

    if regulation_raw is None or spot_raw is None:
        return None

    return regulation_raw, spot_raw, record.balancing_fee


def up_regulation_cost(
    imbalance: float,
    record: MeasurementRecord,
    config: Optional[CalculationConfig] = None,
) -> Optional[CostBreakdown]:
    """Cost of covering a production shortfall.

    Args:
        imbalance: Shortfall volume (positive)
        record: Record supplying prices and fee
        config: Calculation configuration

    Returns:
        CostBreakdown, or None if no valid price is available
    """
    config = config or CalculationConfig()

    prices = _select_prices(record, config)
    if prices is None:
        return None
    regulation_raw, spot_raw, fee_raw = prices

    regulation = to_major_units(regulation_raw, config)
    spot = to_major_units(spot_raw, config)
    fee = to_major_units(fee_raw, config)

    price_difference = max(0.0, regulation - spot)
    total_cost = imbalance * (price_difference + fee)

    spot_cost = imbalance * spot
    actual_cost = imbalance * (regulation + fee)

    return CostBreakdown(
        direction=DIRECTION_UP,
        imbalance_volume=imbalance,
        regulation_price=regulation,
        spot_price=spot,
        regulation_price_raw=regulation_raw,
        spot_price_raw=spot_raw,
        price_difference=price_difference,
        balancing_fee=fee,
        balancing_fee_raw=fee_raw,
        total_cost=total_cost,
        net_result=spot_cost - actual_cost,
        cost_per_unit=price_difference + fee,
        actual_cost=actual_cost,
        spot_cost=spot_cost,
    )


def down_regulation_cost(
    imbalance: float,
    record: MeasurementRecord,
    config: Optional[CalculationConfig] = None,
) -> Optional[CostBreakdown]:
    """Cost of selling a production surplus.

    Args:
        imbalance: Surplus volume (positive)
        record: Record supplying prices and fee
        config: Calculation configuration

    Returns:
        CostBreakdown, or None if no valid price is available
    """
    config = config or CalculationConfig()

    prices = _select_prices(record, config)
    if prices is None:
        return None
    regulation_raw, spot_raw, fee_raw = prices

    regulation = to_major_units(regulation_raw, config)
    spot = to_major_units(spot_raw, config)
    fee = to_major_units(fee_raw, config)

    price_difference = max(0.0, spot - regulation)
    total_cost = imbalance * (price_difference + fee)

    spot_revenue = imbalance * spot
    actual_revenue = imbalance * regulation - imbalance * fee

    return CostBreakdown(
        direction=DIRECTION_DOWN,
        imbalance_volume=imbalance,
        regulation_price=regulation,
        spot_price=spot,
        regulation_price_raw=regulation_raw,
        spot_price_raw=spot_raw,
        price_difference=price_difference,
        balancing_fee=fee,
        balancing_fee_raw=fee_raw,
        total_cost=total_cost,
        net_result=actual_revenue - spot_revenue,
        cost_per_unit=price_difference + fee,
        actual_revenue=actual_revenue,
        spot_revenue=spot_revenue,
    )
