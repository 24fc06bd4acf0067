"""check command: consistency sweep of the index against the artifact root."""

import click

from backend.src.config.settings import get_settings
from backend.src.db.database import SessionLocal
from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.consistency_service import ConsistencyService


def _print_problems(label: str, items: list, color: str) -> None:
    if not items:
        return
    click.echo(click.style(f"  {label}: {len(items)}", fg=color))
    for item in items:
        click.echo(f"    {item}")


@click.command("check")
@click.option(
    "--no-verify-hashes",
    is_flag=True,
    default=False,
    help="Only compare sizes, skip re-hashing file content",
)
def check(no_verify_hashes: bool) -> None:
    """
    Report files that diverge from the index.

    Exits with status 1 when any problem is found. Nothing is repaired.
    """
    settings = get_settings()

    db = SessionLocal()
    try:
        service = ConsistencyService(
            ArtifactStore(db),
            settings.bin_folder,
            verify_hashes=not no_verify_hashes,
        )
        report = service.check()
    finally:
        db.close()

    click.echo(f"  Checked: {report.checked}")
    _print_problems("Missing", report.missing, "red")
    _print_problems("Corrupted", report.corrupted, "red")
    _print_problems("Orphaned", report.orphaned, "yellow")

    if not report.ok:
        raise SystemExit(1)

    click.echo(click.style("OK", fg="green"))
