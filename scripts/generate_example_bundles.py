"""Generate example calculation bundles with synthetic data."""

import sys
from pathlib import Path

import numpy as np
import pandas as pd

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from balancing_engine.core.constants import (
    COL_BALANCING_FEE,
    COL_MINUTE,
    COL_REGULATION_A,
    COL_REGULATION_B,
    COL_SPOT_A,
    COL_SPOT_B,
    COL_TIMESTAMP,
    MARKER_FORECAST,
    MARKER_PRODUCTION,
    MARKER_UNIT,
    SPREADSHEET_EPOCH,
)
from balancing_engine.core.schemas import CalculationConfig
from balancing_engine.io.bundle import init_bundle


def generate_synthetic_portfolio():
    """Generate a two-day, three-site portfolio at 15-minute resolution."""
    print("Generating synthetic_portfolio bundle...")

    np.random.seed(42)

    sites = ["Vindpark Norr", "Vindpark Kust", "Solpark Syd"]
    timestep_minutes = 15
    num_days = 2
    num_steps = int(num_days * 24 * 60 / timestep_minutes)

    dates = pd.date_range("2024-03-01", periods=num_steps, freq=f"{timestep_minutes}min")
    serials = (dates - pd.Timestamp(SPREADSHEET_EPOCH)) / pd.Timedelta(days=1)

    # Spot prices (öre/kWh) with a daily shape
    hour_of_day = dates.hour.to_numpy()
    spot_se3 = 60.0 + 25.0 * np.sin((hour_of_day - 6) * np.pi / 12) + np.random.normal(0, 5, num_steps)
    spot_se4 = spot_se3 + np.random.normal(5, 3, num_steps)

    # Regulation prices scatter around spot
    reg_se3 = spot_se3 + np.random.normal(0, 20, num_steps)
    reg_se4 = spot_se4 + np.random.normal(0, 20, num_steps)

    # Occasional data errors in regulation price
    glitches = np.random.random(num_steps) < 0.02
    reg_se3[glitches] = 999999.0

    fee = np.full(num_steps, 1.2)

    header_row0 = [""] * 7
    header_row1 = [
        COL_TIMESTAMP,
        COL_MINUTE,
        COL_SPOT_A,
        COL_SPOT_B,
        COL_REGULATION_A,
        COL_REGULATION_B,
        COL_BALANCING_FEE,
    ]
    for site in sites:
        header_row0 += [MARKER_PRODUCTION, MARKER_FORECAST, MARKER_UNIT]
        header_row1 += [site, "", ""]

    # Per-site production and forecast (kWh per interval)
    site_columns = []
    for i, site in enumerate(sites):
        if site.startswith("Sol"):
            forecast = np.zeros(num_steps)
            daylight = (hour_of_day >= 7) & (hour_of_day <= 17)
            forecast[daylight] = 400.0 * np.sin((hour_of_day[daylight] - 7) * np.pi / 10) ** 2
        else:
            forecast = 250.0 + 100.0 * np.sin(np.arange(num_steps) * np.pi / (48 + 10 * i))
        production = np.maximum(forecast + np.random.normal(0, 30, num_steps), 0)
        site_columns.append((np.round(production, 1), np.round(forecast, 1)))

    grid = [header_row0, header_row1]
    for t in range(num_steps):
        row = [
            float(serials[t]),
            int(dates[t].minute),
            round(float(spot_se3[t]), 2),
            round(float(spot_se4[t]), 2),
            round(float(reg_se3[t]), 2),
            round(float(reg_se4[t]), 2),
            float(fee[t]),
        ]
        for production, forecast in site_columns:
            row += [float(production[t]), float(forecast[t]), "kWh"]
        grid.append(row)

    # Create bundle
    bundle_path = Path(__file__).parent.parent / "examples" / "bundles" / "synthetic_portfolio"
    init_bundle(bundle_path, grid, CalculationConfig())
    print(f"✓ Created {bundle_path}")


if __name__ == "__main__":
    print("Generating example bundles...\n")
    generate_synthetic_portfolio()
    print("\n✓ All example bundles generated")
