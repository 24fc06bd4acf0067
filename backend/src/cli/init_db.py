"""init-db command: create the index table."""

import click

from backend.src.config.settings import get_settings
from backend.src.db.database import DATABASE_URL, init_db


@click.command("init-db")
def init_db_command() -> None:
    """
    Create the key-value index table and the artifact root.

    Suitable for SQLite. For PostgreSQL prefer 'alembic upgrade head'.
    """
    settings = get_settings()
    settings.bin_folder.mkdir(parents=True, exist_ok=True)
    init_db()
    click.echo(f"Index ready at {DATABASE_URL}")
    click.echo(f"Artifact root: {settings.bin_folder.resolve()}")
