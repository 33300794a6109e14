"""Line-by-line definition scan used when no search engine can run.

This is a degraded mode: single-line kinds use the catalog patterns against
one line at a time, and the two multi-line kinds are approximated by looking
at neighbouring lines instead of a true multi-line match.
"""

import re
import threading
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger as default_logger

from hsdef.errors import LocatorError
from hsdef.models import Match
from hsdef.normalize import split_lines
from hsdef.patterns import DefinitionKind, build_patterns
from hsdef.resolve import resolve
from hsdef.workspace import DEFAULT_SKIP_DIRS, iter_source_files

# Kinds that need more than one line of context
_MULTILINE_KINDS = (DefinitionKind.SIGNATURE_NEXT_LINE, DefinitionKind.CONSTRUCTOR)


class FallbackScanner:
    """Find definition lines without an external search engine."""

    def __init__(self, logger=None):
        self.logger = logger or default_logger

    def scan_text(self, identifier: str, text: str, file_path: str) -> list[Match]:
        """Return every candidate definition line in text, in line order."""
        single_line = [
            (entry.kind, re.compile(entry.pattern))
            for entry in build_patterns(identifier)
            if entry.kind not in _MULTILINE_KINDS
        ]
        symbol = re.escape(identifier)
        constructor_in_data_line = re.compile(r"[=|][ \t]*" + symbol + r"(?:[^\w'\n]|$)")
        constructor_in_continuation = re.compile(
            r"^[ \t]+(?:[=|][ \t]*)?" + symbol + r"(?:[^\w'\n]|$)"
        )

        lines = split_lines(text) if text else []
        matches = []
        in_data = False
        previous = ""

        for index, line in enumerate(lines):
            for kind, regex in single_line:
                if regex.search(line):
                    matches.append(Match(kind, file_path, index, line))

            if line.rstrip() == identifier and index + 1 < len(lines):
                if lines[index + 1].lstrip().startswith("::"):
                    matches.append(Match(DefinitionKind.SIGNATURE_NEXT_LINE, file_path, index, line))

            # Constructors: on the `data` line itself, or on an indented
            # continuation line that starts with `=`/`|` or follows a line
            # ending in `=`
            if line.startswith("data ") or line.startswith("data\t"):
                in_data = True
                if constructor_in_data_line.search(line):
                    matches.append(Match(DefinitionKind.CONSTRUCTOR, file_path, index, line))
            elif in_data and line[:1] in (" ", "\t"):
                stripped = line.lstrip()
                opens_constructor = stripped[:1] in ("=", "|") or previous.rstrip().endswith("=")
                if opens_constructor and constructor_in_continuation.search(line):
                    matches.append(Match(DefinitionKind.CONSTRUCTOR, file_path, index, line))
            else:
                in_data = False

            previous = line

        return matches

    def scan_file(self, identifier: str, file_path: Path) -> Optional[Match]:
        """Best definition in one file, or None (also for unreadable files)."""
        try:
            content = file_path.read_text(encoding="utf-8", errors="ignore")
        except OSError as e:
            self.logger.warning(f"Error reading file {file_path}: {e}")
            return None
        return resolve(self.scan_text(identifier, content, str(file_path)))

    def scan_directory(
        self,
        identifier: str,
        root: Path,
        globs: Iterable[str],
        skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
        cancel: Optional[threading.Event] = None,
    ) -> list[Match]:
        """Best definition per file under root, in enumeration order.

        Raises:
            LocatorError: If root is not a directory.
        """
        root = Path(root)
        if not root.is_dir():
            raise LocatorError(f"Workspace root is not a directory: {root}")

        results = []
        for file_path in iter_source_files(root, globs, skip_dirs):
            if cancel is not None and cancel.is_set():
                self.logger.debug("Fallback scan cancelled")
                return []
            best = self.scan_file(identifier, file_path)
            if best is not None:
                self.logger.debug(
                    f"Found {best.kind.value} in {file_path} at line {best.line_index + 1}"
                )
                results.append(best)
        return results
