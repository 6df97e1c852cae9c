"""Command-line interface for the balancing cost engine."""

import logging

import typer

from balancing_engine import __version__

app = typer.Typer(
    help="Balancing Cost Engine: up/down regulation costs for production portfolios",
    no_args_is_help=True,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show column resolution details")):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def version():
    """Show engine version."""
    typer.echo(f"Balancing Cost Engine v{__version__}")


@app.command()
def validate(bundle_path: str):
    """Validate a calculation bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from balancing_engine.io.bundle import validate_bundle

    try:
        validate_bundle(bundle_path)
        typer.secho(f"✓ Bundle at {bundle_path} is valid", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"✗ Bundle validation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def calculate(bundle_path: str):
    """Calculate balancing costs for a bundle.

    Args:
        bundle_path: Path to bundle directory
    """
    from balancing_engine.runners.calculate import run_calculation

    try:
        run_calculation(bundle_path)
        typer.secho("\n✓ Calculation completed successfully", fg=typer.colors.GREEN)
    except Exception as e:
        typer.secho(f"\n✗ Calculation failed: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command()
def report(bundle_path: str):
    """Print the summary and site totals from calculation results.

    Args:
        bundle_path: Path to bundle directory
    """
    from balancing_engine.io.bundle import load_results

    try:
        result = load_results(bundle_path)
    except FileNotFoundError:
        typer.secho(
            "✗ No results found in bundle. Run calculate first.",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(1)

    summary = result.summary

    typer.echo("\n" + "=" * 60)
    typer.echo("BALANCING COST RESULTS")
    typer.echo("=" * 60)

    typer.echo(f"\nTotal balancing cost: {summary.total_cost:.2f} SEK")

    typer.echo("\nUp Regulation:")
    typer.echo(f"  Cost:             {summary.total_up_regulation_cost:.2f} SEK")
    typer.echo(f"  Volume:           {summary.total_up_volume:.2f} kWh")
    typer.echo(f"  Events:           {summary.number_of_up_regulations}")
    typer.echo(f"  Avg cost/kWh:     {summary.avg_up_cost_per_unit:.4f} SEK")

    typer.echo("\nDown Regulation:")
    typer.echo(f"  Cost:             {summary.total_down_regulation_cost:.2f} SEK")
    typer.echo(f"  Volume:           {summary.total_down_volume:.2f} kWh")
    typer.echo(f"  Events:           {summary.number_of_down_regulations}")
    typer.echo(f"  Avg cost/kWh:     {summary.avg_down_cost_per_unit:.4f} SEK")

    typer.echo("\nCosts by Site:")
    for site, totals in result.totals_by_site.items():
        typer.echo(
            f"  {site}: up {totals.up_regulation_cost:.2f} SEK ({totals.up_regulation_volume:.2f} kWh), "
            f"down {totals.down_regulation_cost:.2f} SEK ({totals.down_regulation_volume:.2f} kWh), "
            f"total {totals.total_cost:.2f} SEK"
        )

    typer.echo("\n" + "=" * 60 + "\n")

    typer.secho("✓ Report generated", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
