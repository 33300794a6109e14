"""Pick the best match per buffer or per file."""

from typing import Iterable, Optional

from hsdef.models import Match
from hsdef.patterns import DefinitionKind


def resolve(matches: Iterable[Match]) -> Optional[Match]:
    """Return the single best match, or None.

    A visible type signature outranks a bare value binding, so when any
    signature matched, assignments are discarded. The first remaining match
    in catalog order wins; within one kind the earliest match wins.
    """
    candidates = list(matches)
    if any(m.kind.is_signature for m in candidates):
        candidates = [m for m in candidates if m.kind is not DefinitionKind.ASSIGNMENT]
    if not candidates:
        return None
    # sorted() is stable, so text order is kept within a kind
    return sorted(candidates, key=lambda m: m.kind.priority)[0]


def resolve_per_file(matches: Iterable[Match]) -> list[Match]:
    """Resolve each file independently, in first-seen file order."""
    by_file: dict[str, list[Match]] = {}
    for match in matches:
        by_file.setdefault(match.file_path, []).append(match)

    resolved = []
    for file_matches in by_file.values():
        best = resolve(file_matches)
        if best is not None:
            resolved.append(best)
    return resolved
