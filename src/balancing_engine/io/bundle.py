"""Calculation bundle I/O operations.

A calculation bundle is a folder containing:
- grid.json: Decoded sheet as a JSON array of rows (two header rows first)
- config.yaml: Calculation configuration (optional, defaults apply)
- (outputs):
  - results.json: Regulation events, site totals, and summary
  - bundle_metadata.json: Reproducibility metadata
"""

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import yaml

from balancing_engine import __version__
from balancing_engine.core.schemas import (
    BalancingResult,
    BundleMetadata,
    CalculationConfig,
    Cell,
    ColumnSchema,
)
from balancing_engine.core.validate import validate_header_grid
from balancing_engine.io.formats import read_json_grid, write_json_grid

GRID_FILE = "grid.json"
CONFIG_FILE = "config.yaml"
RESULTS_FILE = "results.json"
METADATA_FILE = "bundle_metadata.json"


def load_config(path: str | Path) -> CalculationConfig:
    """Load a calculation config from YAML.

    Args:
        path: Path to YAML file

    Returns:
        CalculationConfig (defaults for an empty file)
    """
    with open(path) as f:
        return CalculationConfig(**(yaml.safe_load(f) or {}))


def load_bundle(bundle_path: str | Path) -> tuple[CalculationConfig, list[list[Cell]]]:
    """Load a calculation bundle.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        Tuple of (config, grid)
    """
    bundle_path = Path(bundle_path)

    if not bundle_path.exists():
        raise FileNotFoundError(f"Bundle not found: {bundle_path}")

    config_path = bundle_path / CONFIG_FILE
    config = load_config(config_path) if config_path.exists() else CalculationConfig()

    grid = read_json_grid(str(bundle_path / GRID_FILE))

    return config, grid


def load_results(bundle_path: str | Path) -> BalancingResult:
    """Load previously written results from a bundle.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        BalancingResult
    """
    results_path = Path(bundle_path) / RESULTS_FILE

    if not results_path.exists():
        raise FileNotFoundError(f"No results found in bundle: {bundle_path}")

    with open(results_path) as f:
        return BalancingResult(**json.load(f))


def write_results(
    bundle_path: str | Path,
    result: BalancingResult,
    schema: Optional[ColumnSchema] = None,
    num_records: int = 0,
) -> None:
    """Write results to bundle.

    Args:
        bundle_path: Path to bundle directory
        result: Calculation result
        schema: Resolved schema, recorded in the metadata if provided
        num_records: Number of normalized records
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(exist_ok=True)

    # Write results
    with open(bundle_path / RESULTS_FILE, "w") as f:
        json.dump(result.model_dump(mode="json"), f, indent=2)

    # Write metadata
    metadata = BundleMetadata(
        engine_version=__version__,
        num_records=num_records,
        site_names=schema.site_names if schema is not None else list(result.totals_by_site),
        unresolved_fields=schema.unresolved_fields() if schema is not None else [],
    )
    with open(bundle_path / METADATA_FILE, "w") as f:
        json.dump(metadata.model_dump(), f, indent=2, default=str)


def init_bundle(
    bundle_path: str | Path,
    grid: Sequence[Sequence[Cell]],
    config: Optional[CalculationConfig] = None,
) -> None:
    """Initialize a new calculation bundle.

    Args:
        bundle_path: Path to bundle directory
        grid: Decoded sheet, header rows first
        config: Calculation configuration (omitted from the bundle if None)
    """
    bundle_path = Path(bundle_path)
    bundle_path.mkdir(parents=True, exist_ok=True)

    # Write config
    if config is not None:
        with open(bundle_path / CONFIG_FILE, "w") as f:
            yaml.dump(config.model_dump(), f, default_flow_style=False)

    # Write grid
    write_json_grid(grid, str(bundle_path / GRID_FILE))


def validate_bundle(bundle_path: str | Path) -> bool:
    """Validate that a bundle has all required files.

    Args:
        bundle_path: Path to bundle directory

    Returns:
        True if valid

    Raises:
        ValueError: If bundle is invalid
        MalformedSchemaError: If the grid lacks its two header rows
    """
    bundle_path = Path(bundle_path)

    if not (bundle_path / GRID_FILE).exists():
        raise ValueError(f"Missing required file: {GRID_FILE}")

    validate_header_grid(read_json_grid(str(bundle_path / GRID_FILE)))

    # Config is optional but must parse if present
    config_path = bundle_path / CONFIG_FILE
    if config_path.exists():
        load_config(config_path)

    return True
