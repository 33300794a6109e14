"""In-process search engine using Python's re module."""

import re
import threading
from pathlib import Path
from typing import Optional

from hsdef.engines.base import Deadline, SearchEngine, Source
from hsdef.models import BufferSource, RawMatchEvent, SearchResult, SearchStatus
from hsdef.workspace import iter_source_files


def find_events(regex: re.Pattern, content: str, path: Optional[str]) -> list[RawMatchEvent]:
    """Run a compiled pattern over content and report whole-line spans.

    Like ripgrep's JSON output, each event carries every physical line the
    match touches, from the start of its first line to the end of its last.
    """
    events = []
    for match in regex.finditer(content):
        start, end = match.start(), match.end()
        line_start = content.rfind("\n", 0, start) + 1
        # A match ending on a line break does not extend to the next line
        last = end - 1 if end > start and content[end - 1] == "\n" else end
        line_end = content.find("\n", last)
        if line_end == -1:
            line_end = len(content)

        events.append(RawMatchEvent(
            path=path,
            line_number=content.count("\n", 0, start) + 1,
            text=content[line_start:line_end] + "\n",
        ))
    return events


class PythonEngine(SearchEngine):
    """Run patterns with the standard re module, without spawning a process.

    The timeout and cancel event are checked between files only. A buffer,
    or a single large file, is always searched to the end once started.
    """

    name = "python"

    def is_available(self) -> bool:
        return True

    def search(
        self,
        pattern: str,
        source: Source,
        cancel: Optional[threading.Event] = None,
    ) -> SearchResult:
        try:
            regex = re.compile(pattern, re.MULTILINE)
        except re.error as e:
            return SearchResult.fail(SearchStatus.FAILED, f"Invalid regex pattern: {e}")

        if isinstance(source, BufferSource):
            return SearchResult.ok(find_events(regex, source.text, None))

        root = Path(source.root)
        if not root.is_dir():
            return SearchResult.fail(SearchStatus.FAILED, f"Path not found: {root}")

        deadline = Deadline(self.timeout, cancel)
        events = []
        for file_path in iter_source_files(root, source.globs, source.skip_dirs):
            if deadline.cancelled:
                return SearchResult.fail(SearchStatus.CANCELLED, "Search cancelled")
            if deadline.expired:
                return SearchResult.fail(
                    SearchStatus.TIMEOUT, f"Search timed out after {self.timeout}s"
                )
            try:
                content = file_path.read_text(encoding="utf-8", errors="ignore")
            except OSError as e:
                self.logger.debug(f"Skipping unreadable file {file_path}: {e}")
                continue
            events.extend(find_events(regex, content, str(file_path)))

        return SearchResult.ok(events)
