"""Data records passed between the locator stages."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from hsdef.patterns import DefinitionKind


# Stands in for a file path when the match came from the queried buffer
BUFFER_PATH = "<buffer>"

DEFAULT_EXTENSIONS = ["*.hs"]


@dataclass(frozen=True)
class BufferSource:
    """In-memory text to search."""
    text: str


@dataclass(frozen=True)
class DirectorySource:
    """Directory tree to search, restricted to files matching `globs`."""
    root: Path
    globs: tuple[str, ...] = tuple(DEFAULT_EXTENSIONS)
    skip_dirs: frozenset[str] = frozenset()


@dataclass(frozen=True)
class RawMatchEvent:
    """One occurrence as reported by a search engine.

    Attributes:
        path: File the match came from, or None for a buffer search.
        line_number: 1-based line of the start of the match.
        text: The full physical lines covered by the match.
    """
    path: Optional[str]
    line_number: int
    text: str


@dataclass(frozen=True)
class Match:
    """A normalized occurrence tagged with the definition kind it matched."""
    kind: DefinitionKind
    file_path: str
    line_index: int
    line_text: str


@dataclass(frozen=True)
class Location:
    """Where to jump for a resolved definition."""
    file_path: str
    line_index: int
    line_length: int
    line_text: str = ""

    @classmethod
    def from_match(cls, match: Match, file_path: Optional[str] = None) -> "Location":
        return cls(
            file_path=file_path or match.file_path,
            line_index=match.line_index,
            line_length=len(match.line_text),
            line_text=match.line_text,
        )

    def to_dict(self) -> dict:
        return {
            "file": self.file_path,
            "line": self.line_index + 1,
            "length": self.line_length,
            "text": self.line_text,
        }


class SearchStatus(Enum):
    OK = "ok"
    NO_MATCHES = "no_matches"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass
class SearchResult:
    """Outcome of running one pattern against one source.

    Attributes:
        status: What happened.
        events: Match events (only for OK).
        error: Diagnostic text for the failure statuses.
    """
    status: SearchStatus
    events: list[RawMatchEvent] = field(default_factory=list)
    error: str = ""

    @property
    def success(self) -> bool:
        """True for OK and NO_MATCHES, which are both clean outcomes."""
        return self.status in (SearchStatus.OK, SearchStatus.NO_MATCHES)

    @classmethod
    def ok(cls, events: list[RawMatchEvent]) -> "SearchResult":
        if not events:
            return cls(status=SearchStatus.NO_MATCHES)
        return cls(status=SearchStatus.OK, events=list(events))

    @classmethod
    def no_matches(cls) -> "SearchResult":
        return cls(status=SearchStatus.NO_MATCHES)

    @classmethod
    def fail(cls, status: SearchStatus, error: str) -> "SearchResult":
        return cls(status=status, error=error)
