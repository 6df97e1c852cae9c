"""Test price selection and up/down regulation cost formulas."""

from datetime import datetime

import pytest

from balancing_engine.core.schemas import CalculationConfig, MeasurementRecord
from balancing_engine.settlement.costs import down_regulation_cost, up_regulation_cost
from balancing_engine.settlement.prices import (
    select_regulation_price,
    select_spot_price,
    to_major_units,
)


def make_record(
    spot_a=500.0,
    spot_b=450.0,
    regulation_a=600.0,
    regulation_b=550.0,
    fee=50.0,
) -> MeasurementRecord:
    """Build a record carrying only prices."""
    return MeasurementRecord(
        timestamp=datetime(2024, 1, 1),
        spot_price_a=spot_a,
        spot_price_b=spot_b,
        regulation_price_a=regulation_a,
        regulation_price_b=regulation_b,
        balancing_fee=fee,
    )


class TestPriceSelection:
    """Tests for zone A / zone B price selection."""

    def test_regulation_prefers_zone_a(self):
        """Test that a valid zone A regulation price is used."""
        assert select_regulation_price(make_record(regulation_a=600, regulation_b=550)) == 600

    def test_regulation_falls_back_to_zone_b(self):
        """Test that an out-of-band zone A price falls back to zone B."""
        assert select_regulation_price(make_record(regulation_a=600000, regulation_b=550)) == 550
        assert select_regulation_price(make_record(regulation_a=-100001, regulation_b=550)) == 550

    def test_regulation_band_is_inclusive(self):
        """Test that the band limits themselves are accepted."""
        assert select_regulation_price(make_record(regulation_a=500000)) == 500000
        assert select_regulation_price(make_record(regulation_a=-100000)) == -100000

    def test_regulation_zero_and_negative_accepted(self):
        """Test that zero and negative prices inside the band are valid."""
        assert select_regulation_price(make_record(regulation_a=0)) == 0
        assert select_regulation_price(make_record(regulation_a=-250)) == -250

    def test_regulation_both_zones_rejected(self):
        """Test that both zones out of band gives no price."""
        assert select_regulation_price(make_record(regulation_a=600000, regulation_b=700000)) is None

    def test_regulation_unresolved_zone_falls_back(self):
        """Test that an unresolved zone A column falls back to zone B."""
        assert select_regulation_price(make_record(regulation_a=None, regulation_b=550)) == 550
        assert select_regulation_price(make_record(regulation_a=None, regulation_b=None)) is None

    def test_regulation_band_from_config(self):
        """Test that a narrower configured band rejects more prices."""
        config = CalculationConfig(min_regulation_price=0, max_regulation_price=1000)

        assert select_regulation_price(make_record(regulation_a=1500, regulation_b=900), config) == 900

    def test_spot_prefers_zone_a(self):
        """Test that a positive zone A spot price is used."""
        assert select_spot_price(make_record(spot_a=500, spot_b=450)) == 500

    def test_spot_falls_back_to_zone_b(self):
        """Test that non-positive zone A spot prices fall back to zone B."""
        assert select_spot_price(make_record(spot_a=0, spot_b=450)) == 450
        assert select_spot_price(make_record(spot_a=-5, spot_b=450)) == 450
        assert select_spot_price(make_record(spot_a=None, spot_b=450)) == 450

    def test_spot_both_zones_rejected(self):
        """Test that no positive spot price gives no price."""
        assert select_spot_price(make_record(spot_a=0, spot_b=0)) is None
        assert select_spot_price(make_record(spot_a=-1, spot_b=None)) is None

    def test_minor_to_major_units(self):
        """Test the fixed öre to SEK conversion."""
        assert to_major_units(600) == pytest.approx(0.6)
        assert to_major_units(50) == pytest.approx(0.05)


class TestUpRegulationCost:
    """Tests for the up regulation (shortfall) formula."""

    def test_reference_example(self):
        """Test reg=600, spot=500, fee=50, volume=10."""
        cost = up_regulation_cost(10.0, make_record(spot_a=500, regulation_a=600, fee=50))

        assert cost.direction == "up"
        assert cost.imbalance_volume == 10.0
        assert cost.regulation_price == pytest.approx(0.6)
        assert cost.spot_price == pytest.approx(0.5)
        assert cost.balancing_fee == pytest.approx(0.05)
        assert cost.regulation_price_raw == 600
        assert cost.spot_price_raw == 500
        assert cost.balancing_fee_raw == 50
        assert cost.price_difference == pytest.approx(0.1)
        assert cost.total_cost == pytest.approx(1.5)
        assert cost.cost_per_unit == pytest.approx(0.15)

    def test_actual_and_spot_cost(self):
        """Test net result = spot cost - actual cost."""
        cost = up_regulation_cost(10.0, make_record(spot_a=500, regulation_a=600, fee=50))

        assert cost.actual_cost == pytest.approx(6.5)
        assert cost.spot_cost == pytest.approx(5.0)
        assert cost.net_result == pytest.approx(-1.5)
        assert cost.actual_revenue is None
        assert cost.spot_revenue is None

    def test_regulation_below_spot_clamps_difference(self):
        """Test that a regulation price below spot costs only the fee."""
        cost = up_regulation_cost(10.0, make_record(spot_a=500, regulation_a=400, fee=50))

        assert cost.price_difference == 0.0
        assert cost.total_cost == pytest.approx(0.5)
        assert cost.net_result == pytest.approx(0.5)

    def test_no_price_no_cost(self):
        """Test that no valid price means no cost breakdown."""
        assert up_regulation_cost(10.0, make_record(regulation_a=600000, regulation_b=600000)) is None
        assert up_regulation_cost(10.0, make_record(spot_a=0, spot_b=0)) is None


class TestDownRegulationCost:
    """Tests for the down regulation (surplus) formula."""

    def test_reference_example(self):
        """Test reg=400, spot=500, fee=50, volume=10."""
        cost = down_regulation_cost(10.0, make_record(spot_a=500, regulation_a=400, fee=50))

        assert cost.direction == "down"
        assert cost.price_difference == pytest.approx(0.1)
        assert cost.total_cost == pytest.approx(1.5)
        assert cost.actual_revenue == pytest.approx(3.5)
        assert cost.spot_revenue == pytest.approx(5.0)
        assert cost.net_result == pytest.approx(-1.5)
        assert cost.cost_per_unit == pytest.approx(0.15)
        assert cost.actual_cost is None
        assert cost.spot_cost is None

    def test_regulation_above_spot_clamps_difference(self):
        """Test that a regulation price above spot costs only the fee."""
        cost = down_regulation_cost(10.0, make_record(spot_a=500, regulation_a=600, fee=50))

        assert cost.price_difference == 0.0
        assert cost.total_cost == pytest.approx(0.5)
        assert cost.net_result == pytest.approx(0.5)

    def test_zero_fee(self):
        """Test that a zero fee leaves only the price difference."""
        cost = down_regulation_cost(4.0, make_record(spot_a=500, regulation_a=250, fee=0))

        assert cost.total_cost == pytest.approx(1.0)
        assert cost.cost_per_unit == pytest.approx(0.25)

    def test_custom_price_scale(self):
        """Test that the configured scale drives the conversion."""
        config = CalculationConfig(price_scale=100.0)
        cost = down_regulation_cost(1.0, make_record(spot_a=500, regulation_a=400, fee=0), config)

        assert cost.spot_price == pytest.approx(5.0)
        assert cost.total_cost == pytest.approx(1.0)


class TestCalculationConfig:
    """Tests for configuration validation."""

    def test_defaults(self):
        """Test default pricing conventions."""
        config = CalculationConfig()

        assert config.price_scale == 1000.0
        assert config.min_regulation_price == -100000.0
        assert config.max_regulation_price == 500000.0
        assert config.default_unit == "kWh"
        assert config.track_late_sites is False

    def test_invalid_band(self):
        """Test that an empty price band is rejected."""
        with pytest.raises(ValueError, match="max_regulation_price"):
            CalculationConfig(min_regulation_price=100, max_regulation_price=100)

    def test_invalid_scale(self):
        """Test that a non-positive scale is rejected."""
        with pytest.raises(ValueError):
            CalculationConfig(price_scale=0)
