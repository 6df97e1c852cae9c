"""Golden bundle tests - validate example bundles produce expected results."""

import json
import shutil
from pathlib import Path

import pytest

from balancing_engine.core.validate import MalformedSchemaError, validate_balancing_result
from balancing_engine.io.bundle import load_bundle, load_results, validate_bundle
from balancing_engine.runners.calculate import calculate_balancing_costs, run_calculation


@pytest.fixture
def examples_dir():
    """Get examples directory path."""
    return Path(__file__).parent.parent / "examples" / "bundles"


@pytest.fixture
def two_sites_bundle(examples_dir, tmp_path):
    """Copy of the two_sites bundle, so results are not written into the repo."""
    bundle_path = tmp_path / "two_sites"
    shutil.copytree(examples_dir / "two_sites", bundle_path)
    return bundle_path


def test_two_sites_bundle_is_valid(two_sites_bundle):
    """Test that the example bundle passes validation."""
    assert validate_bundle(two_sites_bundle)


def test_two_sites_bundle(two_sites_bundle):
    """Test two-site bundle with a dropped row and a rejected price."""
    result = run_calculation(str(two_sites_bundle))

    validate_balancing_result(result)

    summary = result.summary
    assert summary.number_of_up_regulations == 3
    assert summary.number_of_down_regulations == 2
    assert summary.total_up_regulation_cost == pytest.approx(5.55)
    assert summary.total_down_regulation_cost == pytest.approx(2.5)
    assert summary.total_cost == pytest.approx(8.05)
    assert summary.total_up_volume == pytest.approx(19.0)
    assert summary.total_down_volume == pytest.approx(30.0)

    norr = result.totals_by_site["Vindpark Norr"]
    assert norr.up_regulation_cost == pytest.approx(3.75)
    assert norr.down_regulation_cost == pytest.approx(1.5)
    assert norr.total_cost == pytest.approx(5.25)

    syd = result.totals_by_site["Solpark Syd"]
    assert syd.up_regulation_cost == pytest.approx(1.8)
    assert syd.down_regulation_cost == pytest.approx(1.0)
    assert syd.total_cost == pytest.approx(2.8)

    # Row without timestamp is dropped, so indices refer to kept records
    assert [event.row_index for event in result.up_regulation] == [0, 3, 3]
    assert [event.row_index for event in result.down_regulation] == [0, 1]

    # Zone A spot price of 0 falls back to zone B
    assert result.up_regulation[1].cost.spot_price_raw == 300


def test_two_sites_results_written(two_sites_bundle):
    """Test that results and metadata are written and reload."""
    result = run_calculation(str(two_sites_bundle))

    reloaded = load_results(two_sites_bundle)
    assert reloaded.summary == result.summary
    assert list(reloaded.totals_by_site) == list(result.totals_by_site)

    with open(two_sites_bundle / "bundle_metadata.json") as f:
        metadata = json.load(f)

    assert metadata["num_records"] == 4
    assert metadata["site_names"] == ["Vindpark Norr", "Solpark Syd"]
    assert metadata["unresolved_fields"] == []


def test_library_entry_point_matches_runner(two_sites_bundle):
    """Test that the pure pipeline gives the same result as the runner."""
    config, grid = load_bundle(two_sites_bundle)

    assert calculate_balancing_costs(grid, config) == run_calculation(str(two_sites_bundle))


def test_missing_results(two_sites_bundle):
    """Test that reporting before calculating fails clearly."""
    with pytest.raises(FileNotFoundError):
        load_results(two_sites_bundle)


def test_bundle_without_header_rows(tmp_path):
    """Test that a grid with one row cannot be processed."""
    (tmp_path / "grid.json").write_text('[["Datum och tid"]]')

    with pytest.raises(MalformedSchemaError):
        validate_bundle(tmp_path)

    with pytest.raises(MalformedSchemaError):
        run_calculation(str(tmp_path))


def test_missing_bundle(tmp_path):
    """Test that a missing bundle directory is reported."""
    with pytest.raises(FileNotFoundError):
        load_bundle(tmp_path / "nope")

    with pytest.raises(ValueError, match="grid.json"):
        validate_bundle(tmp_path)
