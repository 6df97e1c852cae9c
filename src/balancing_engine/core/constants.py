"""Canonical header labels, default positions, units, and sign conventions.

SIGN CONVENTIONS:
- imbalance = production - forecast
- imbalance > 0: overproduction, surplus sold back -> DOWN regulation
- imbalance < 0: underproduction, shortfall bought -> UP regulation
- imbalance == 0: balanced, no regulation event
- Event volumes are always reported as positive magnitudes.
- total_cost: Positive = cost of the imbalance vs. spot
- net_result: Negative = worse off than trading the volume at spot

UNITS:
- Prices as supplied: öre/kWh (minor unit)
- Prices in cost arithmetic: SEK/kWh (major unit) = minor / PRICE_SCALE
- Production and forecast: energy per interval, taken as given (no kW -> kWh step)
- Timestamps: spreadsheet serial days since SPREADSHEET_EPOCH, or date values

HEADER LAYOUT:
Row 0 carries group markers ("Produktion", "Prognos", "Enhet") above each site.
Row 1 carries fixed column labels and, above each production column, the site name.
Data rows start at row 2.
"""

from datetime import datetime

# Fixed column labels (header row 1)
COL_TIMESTAMP = "Datum och tid"
COL_MINUTE = "Minut"
COL_SPOT_A = "Spot SE3"
COL_SPOT_B = "Spot SE4"
COL_REGULATION_A = "Reglerpris SE3"
COL_REGULATION_B = "Reglerpris SE4"
COL_BALANCING_FEE = "Avgift_Balanskraft"

# Label -> expected position in header row 1
DEFAULT_COLUMN_POSITIONS = {
    COL_TIMESTAMP: 0,
    COL_MINUTE: 1,
    COL_SPOT_A: 2,
    COL_SPOT_B: 3,
    COL_REGULATION_A: 4,
    COL_REGULATION_B: 5,
    COL_BALANCING_FEE: 6,
}

# Label -> ColumnSchema attribute
FIELD_NAMES = {
    COL_TIMESTAMP: "timestamp",
    COL_MINUTE: "minute_of_interval",
    COL_SPOT_A: "spot_price_a",
    COL_SPOT_B: "spot_price_b",
    COL_REGULATION_A: "regulation_price_a",
    COL_REGULATION_B: "regulation_price_b",
    COL_BALANCING_FEE: "balancing_fee",
}

# Site group markers (header row 0)
MARKER_PRODUCTION = "Produktion"
MARKER_FORECAST = "Prognos"
MARKER_UNIT = "Enhet"

HEADER_ROW_COUNT = 2

DEFAULT_UNIT = "kWh"

# Spreadsheet serial date origin (day 0)
SPREADSHEET_EPOCH = datetime(1899, 12, 30)
SECONDS_PER_DAY = 86400

# Minor -> major currency unit (öre -> SEK)
PRICE_SCALE = 1000.0

# Accepted regulation price band in minor units; outside is treated as a data error
MIN_REGULATION_PRICE = -100000.0
MAX_REGULATION_PRICE = 500000.0

DIRECTION_UP = "up"
DIRECTION_DOWN = "down"

# Tolerance for numerical comparisons
NUMERICAL_TOLERANCE = 1e-9
