"""Inspect command - show the header and binding target of a plot file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click
from rich.table import Table

from mass_binding.cli.logging import configure_cli_logging
from mass_binding.cli.rich_output import make_console
from mass_binding.plots.classifier import classify
from mass_binding.plots.headers import (
    ChiaPlotInfo,
    HeaderInfo,
    HeaderParseError,
    parse_header,
)
from mass_binding.plots.models import PlotFormat
from mass_binding.plots.targets import TargetDerivationError, derive_target


def _header_fields(info: HeaderInfo) -> dict[str, Any]:
    if isinstance(info, ChiaPlotInfo):
        return {
            "plot_id": info.plot_id.hex(),
            "k": info.k,
            "format_description": info.format_description,
            "pool_public_key": (
                info.pool_public_key.hex() if info.pool_public_key else None
            ),
            "pool_contract_puzzle_hash": (
                info.pool_contract_puzzle_hash.hex()
                if info.pool_contract_puzzle_hash
                else None
            ),
            "farmer_public_key": info.farmer_public_key.hex(),
        }
    return {
        "version": info.version,
        "public_key": info.public_key.hex(),
        "bit_length": info.bit_length,
        "checkpoint": info.checkpoint,
        "plotted": info.plotted,
    }


@click.command("inspect")
@click.argument(
    "plot_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "-t",
    "--type",
    "plot_type",
    default=None,
    help="Plot type (m1 / m2) when it cannot be told from the filename.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def inspect_plot(plot_file: Path, plot_type: str | None, as_json: bool) -> None:
    """Show the header metadata and binding target of PLOT_FILE.

    Examples:
        mass-binding inspect /mnt/plots/1_<pubkey>_32.massdb
        mass-binding inspect odd-name.plot --type m2 --json
    """
    configure_cli_logging("inspect")

    if plot_type:
        try:
            plot_format = PlotFormat.from_selector(plot_type)
        except ValueError as exc:
            raise click.UsageError(str(exc)) from exc
    else:
        detected = classify(plot_file.name)
        if detected is None:
            raise click.ClickException(
                f"{plot_file.name} is not a recognised plot filename, "
                "pass --type m1 or --type m2"
            )
        plot_format = detected

    try:
        info = parse_header(plot_file, plot_format)
    except HeaderParseError as exc:
        raise click.ClickException(str(exc)) from exc

    output: dict[str, Any] = {
        "path": str(plot_file.absolute()),
        "type": plot_format.selector,
        **_header_fields(info),
    }
    try:
        output["target"] = derive_target(info).hex()
    except TargetDerivationError as exc:
        output["target"] = None
        output["target_error"] = str(exc)

    if as_json:
        click.echo(json.dumps(output, indent=2))
        return

    table = Table(title=f"{plot_format.label}: {plot_file.name}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for key, value in output.items():
        table.add_row(key, "-" if value is None else str(value))
    make_console().print(table)
