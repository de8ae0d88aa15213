"""Collect command - search plot directories and export a binding list."""

from __future__ import annotations

import logging
from pathlib import Path

import click
from rich.table import Table

from mass_binding.cli.logging import configure_cli_logging
from mass_binding.cli.rich_output import make_console, should_use_rich
from mass_binding.plots import (
    CancellationToken,
    DirectoryReport,
    DirectoryScanError,
    KeystoreError,
    OwnershipChecker,
    PlotFormat,
    ReportWriteError,
    ScanConfig,
    TargetDerivationError,
    check_output_path,
    handle_interrupts,
    load_keystore,
    write_binding_list,
)
from mass_binding.plots import collect as collect_plots
from mass_binding.settings import get_default_plot_type

logger = logging.getLogger(__name__)


def _resolve_plot_format(plot_type: str | None) -> PlotFormat:
    selector = plot_type or get_default_plot_type()
    if not selector:
        raise click.UsageError(
            "missing --type, should be m1 (for native MassDB) or m2 (for Chia Plot)"
        )
    try:
        return PlotFormat.from_selector(selector)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc


def _split_dirs(values: tuple[str, ...]) -> list[str]:
    """Flatten repeated and comma-separated ``--dirs`` values."""
    dirs: list[str] = []
    for value in values:
        dirs.extend(part.strip() for part in value.split(",") if part.strip())
    return dirs


def _print_reports(reports: list[DirectoryReport]) -> None:
    table = Table(title="Plot Directories")
    table.add_column("Directory", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Matched", justify="right")
    table.add_column("Included", justify="right", style="green")
    table.add_column("Excluded", justify="right", style="yellow")
    table.add_column("Skipped", justify="right", style="red")

    for report in reports:
        table.add_row(
            str(report.directory),
            report.plot_format.selector,
            str(report.matched),
            str(report.included),
            str(report.excluded),
            str(report.skipped),
        )

    if table.row_count:
        make_console().print(table)


@click.command("collect")
@click.argument("export_filename", type=click.Path(path_type=Path))
@click.option(
    "-o", "--overwrite", is_flag=True, help="Overwrite an existing export file."
)
@click.option(
    "-a",
    "--all",
    "list_all",
    is_flag=True,
    help="List all native files instead of only fully plotted files.",
)
@click.option(
    "--keystore",
    "keystore_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Keystore file; chia plots without held private keys are eliminated.",
)
@click.option(
    "-t",
    "--type",
    "plot_type",
    default=None,
    help="Plot type: m1 (native MassDB) or m2 (Chia Plot).",
)
@click.option(
    "-d",
    "--dirs",
    "directories",
    multiple=True,
    help="Search directory (repeatable, or comma separated).",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose console logging.")
def collect(
    export_filename: Path,
    overwrite: bool,
    list_all: bool,
    keystore_path: Path | None,
    plot_type: str | None,
    directories: tuple[str, ...],
    verbose: bool,
) -> None:
    """Collect plot files into a binding list.

    Searches each directory for plot files of the selected type, derives
    their binding targets and writes the deduplicated list as JSON to
    EXPORT_FILENAME.

    Examples:
        mass-binding collect list.json -t m1 -d /mnt/a -d /mnt/b
        mass-binding collect list.json -t m2 -d /mnt/chia --keystore keys.yaml
    """
    configure_cli_logging("collect", verbose=verbose)

    plot_format = _resolve_plot_format(plot_type)

    try:
        export_path = check_output_path(export_filename, overwrite=overwrite)
    except ReportWriteError as exc:
        raise click.ClickException(str(exc)) from exc

    keystore: OwnershipChecker | None = None
    if keystore_path is not None:
        if plot_format is PlotFormat.CHIA:
            try:
                keystore = load_keystore(keystore_path)
            except KeystoreError as exc:
                raise click.ClickException(str(exc)) from exc
        else:
            logger.warning("--keystore only applies to chia plots, ignoring it")

    config = ScanConfig.create(
        plot_format,
        _split_dirs(directories),
        list_all=list_all,
        keystore=keystore,
    )

    try:
        with handle_interrupts(CancellationToken()) as token:
            result = collect_plots(config, token)
    except (DirectoryScanError, TargetDerivationError) as exc:
        logger.error("Failed to collect plot files: %s", exc)
        raise click.ClickException(str(exc)) from exc

    if result.binding_list is None:
        click.echo("cancelled searching plot files, nothing saved")
        return

    binding_list = result.binding_list
    if binding_list.total_count == 0:
        click.echo("saved nothing in the binding list")
        return

    try:
        write_binding_list(export_path, binding_list)
    except ReportWriteError as exc:
        raise click.ClickException(str(exc)) from exc

    if should_use_rich():
        _print_reports(result.reports)
    click.echo(f"collected {binding_list.total_count} plot files.")
