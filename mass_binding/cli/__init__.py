"""CLI interface for mass-binding.

Commands:
    collect   Search plot directories and export a binding list
    inspect   Show the header and binding target of one plot file
"""

import logging

import click
from dotenv import load_dotenv

from mass_binding import __version__

# Load environment variables from .env file
load_dotenv(override=True)

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    help="Show the mass-binding version and exit.",
)
@click.pass_context
def main(ctx: click.Context, version: bool) -> None:
    """mass-binding - binding target lists for MASS plot files.

    \b
      mass-binding collect list.json -t m1 -d /mnt/plots
      mass-binding collect list.json -t m2 -d /mnt/chia --keystore keys.yaml
      mass-binding inspect /mnt/plots/plot-k32-....plot
    """
    if version:
        click.echo(__version__)
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


from mass_binding.cli.collect import collect  # noqa: E402
from mass_binding.cli.inspect_plot import inspect_plot  # noqa: E402

main.add_command(collect)
main.add_command(inspect_plot)


if __name__ == "__main__":
    main()
