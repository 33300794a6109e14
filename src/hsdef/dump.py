"""Definition dump - resolve every identifier in a file and report the results."""

from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger as default_logger

from hsdef.errors import LocatorError
from hsdef.identifiers import iter_identifiers
from hsdef.locator import DefinitionLocator
from hsdef.models import Location


def collect_definitions(
    locator: DefinitionLocator,
    file_path: Path,
    workspace_root: Optional[Path],
    file_extensions: Optional[list[str]] = None,
    logger=None,
) -> tuple[dict[str, list[Location]], list[str]]:
    """Locate every lower-case identifier used in a file.

    Returns:
        Tuple of (identifier -> locations, identifiers without a definition),
        both in first-occurrence order.
    """
    logger = logger or default_logger
    text = Path(file_path).read_text(encoding="utf-8", errors="ignore")
    identifiers = iter_identifiers(text)
    logger.debug(f"Found {len(identifiers)} potential identifiers in {file_path}")

    found: dict[str, list[Location]] = {}
    missing: list[str] = []
    for identifier in identifiers:
        try:
            locations = locator.locate(
                identifier,
                buffer_text=text,
                workspace_root=workspace_root,
                file_extensions=file_extensions,
                current_file=file_path,
            )
        except LocatorError as e:
            logger.warning(f"Skipping '{identifier}': {e}")
            locations = []
        if locations:
            found[identifier] = locations
        else:
            missing.append(identifier)
    return found, missing


def render_dump(
    file_path: Path,
    found: dict[str, list[Location]],
    missing: list[str],
    generated: Optional[datetime] = None,
) -> str:
    """Render the dump as Markdown."""
    generated = generated or datetime.now()
    lines = [
        f"# Definition Dump for {file_path}",
        "",
        f"Generated on: {generated.isoformat()}",
        "",
        "## Definitions Found",
        "",
    ]
    for identifier, locations in found.items():
        for location in locations:
            lines.append(f'"{identifier}": {location.file_path}:{location.line_index + 1}')
            lines.append(f"    {location.line_text.strip()}")
            lines.append("")

    if missing:
        lines.append("## Identifiers Without Definitions")
        lines.append("")
        lines.append(f"**{len(missing)} identifier(s) with no definitions found:**")
        lines.append("")
        lines.append(", ".join(missing))
        lines.append("")

    return "\n".join(lines)
