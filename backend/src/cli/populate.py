"""
populate command: ingest upstream GitHub releases.

Downloads every asset of every published release of SAR_DL_UPSTREAM_REPO
into the artifact root and records it in the index.
"""

from typing import Optional

import click

from backend.src.config.settings import get_settings
from backend.src.db.database import SessionLocal
from backend.src.services.artifact_store import ArtifactStore
from backend.src.services.populate_service import (
    GitHubReleaseClient,
    PopulateService,
    UpstreamError,
)


@click.command("populate")
@click.option(
    "--repo",
    default=None,
    help="GitHub repository as owner/name (default: SAR_DL_UPSTREAM_REPO)",
)
def populate(repo: Optional[str]) -> None:
    """Ingest all upstream releases into the index."""
    settings = get_settings()
    repo = repo or settings.upstream_repo

    click.echo(f"Fetching releases of {repo}...")

    db = SessionLocal()
    try:
        with GitHubReleaseClient(repo, token=settings.github_token) as client:
            service = PopulateService(ArtifactStore(db), settings.bin_folder, client)
            summary = service.populate()
    except UpstreamError as e:
        raise click.ClickException(e.message)
    finally:
        db.close()

    click.echo(f"  Releases: {summary.releases}")
    click.echo(f"  Files inserted: {summary.inserted}")
    if summary.channels:
        click.echo(f"  Latest updated: {', '.join(summary.channels)}")

    if not summary.ok:
        click.echo(click.style(f"  Failed: {len(summary.failed)}", fg="red"))
        for name in summary.failed:
            click.echo(f"    {name}")
        raise SystemExit(1)

    click.echo(click.style("Done.", fg="green"))
