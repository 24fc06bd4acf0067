"""
CLI entry point.

Main command group for the sar-dl command line interface.
"""

import click

from backend.src.db.database import dispose_engine
from backend.src.utils.logging_config import init_logging


@click.group()
@click.version_option(version="1.0.0", prog_name="sar-dl")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    SAR Downloads - artifact index maintenance.

    Operates on the index configured by SAR_DL_DB_URL and the artifact
    root configured by SAR_DL_BIN_FOLDER.

    Use 'sar-dl COMMAND --help' for more information on a command.
    """
    ctx.ensure_object(dict)
    init_logging()
    ctx.call_on_close(dispose_engine)


# Import and register subcommands
from backend.src.cli.init_db import init_db_command  # noqa: E402
from backend.src.cli.populate import populate  # noqa: E402
from backend.src.cli.check import check  # noqa: E402

cli.add_command(init_db_command)
cli.add_command(populate)
cli.add_command(check)


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
