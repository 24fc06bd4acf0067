"""
HTML listing renderer using Jinja2 templates.

Renders the download index served at "/": the latest pointer of every
channel followed by all stored binaries grouped by version.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound

from backend.src.schemas.binaries import BinaryFilePublic, ReleaseVersion


LISTING_TEMPLATE = "index.html"
DATE_FORMAT = "%Y-%m-%d %H:%M"


@dataclass
class ListingContext:
    """Data passed to the listing template."""
    latest: List[ReleaseVersion]
    binaries: List[BinaryFilePublic]
    title: str = "SAR Downloads"
    generated_at: datetime = field(default_factory=datetime.now)

    def grouped(self) -> List[Tuple[str, List[BinaryFilePublic]]]:
        """Binaries grouped by version, in order of first appearance."""
        groups: Dict[str, List[BinaryFilePublic]] = {}
        for binary in self.binaries:
            groups.setdefault(binary.version, []).append(binary)
        return list(groups.items())


def format_date(value: datetime) -> str:
    """Jinja2 filter: 'YYYY-MM-DD HH:MM'."""
    return value.strftime(DATE_FORMAT)


class ListingRenderer:
    """
    Renders the HTML download index.

    Args:
        template_dir: Template directory. Defaults to backend/src/templates.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        if template_dir is None:
            template_dir = Path(__file__).parent.parent / "templates"

        if not Path(template_dir).exists():
            raise FileNotFoundError(f"Template directory not found: {template_dir}")

        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["format_date"] = format_date

    def render_listing(self, context: ListingContext) -> str:
        """
        Render the listing page.

        Raises:
            TemplateNotFound: If the listing template is missing
            TemplateError: If rendering fails
        """
        try:
            template = self.env.get_template(LISTING_TEMPLATE)
            return template.render(
                title=context.title,
                latest=context.latest,
                groups=context.grouped(),
                generated_at=context.generated_at,
            )
        except TemplateNotFound:
            raise TemplateNotFound(
                f"Template '{LISTING_TEMPLATE}' not found in {self.env.loader.searchpath[0]}"
            )
        except TemplateError as e:
            raise TemplateError(f"Error rendering template '{LISTING_TEMPLATE}': {e}")
