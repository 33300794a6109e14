"""Definition locator - buffer first, then workspace."""

import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional, Union

from loguru import logger as default_logger

from hsdef.engines import PythonEngine, SearchEngine
from hsdef.engines.base import Source
from hsdef.errors import LocatorError
from hsdef.fallback import FallbackScanner
from hsdef.models import (
    BUFFER_PATH,
    DEFAULT_EXTENSIONS,
    BufferSource,
    DirectorySource,
    Location,
    Match,
    SearchStatus,
)
from hsdef.normalize import normalize_all
from hsdef.patterns import PatternEntry, build_patterns
from hsdef.resolve import resolve, resolve_per_file
from hsdef.workspace import DEFAULT_SKIP_DIRS


class EngineUnavailable(Exception):
    """Internal signal: the engine could not be started for some pattern."""
    pass


class DefinitionLocator:
    """Find the definition site of a Haskell identifier.

    The current buffer is searched first and a hit there is the only answer.
    Otherwise the workspace is searched and the best match in each file is
    returned. When the search engine cannot run at all, a line-by-line
    fallback scan takes its place.
    """

    def __init__(
        self,
        engine: Optional[SearchEngine] = None,
        max_workers: int = 4,
        skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
        logger=None,
    ):
        self.logger = logger or default_logger
        self.engine = engine or PythonEngine(logger=self.logger)
        self.max_workers = max(1, max_workers)
        self.skip_dirs = frozenset(skip_dirs)
        self.fallback = FallbackScanner(logger=self.logger)

    def locate(
        self,
        identifier: str,
        buffer_text: Optional[str] = None,
        workspace_root: Optional[Union[str, Path]] = None,
        file_extensions: Optional[list[str]] = None,
        current_file: Optional[Union[str, Path]] = None,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> list[Location]:
        """Locate the definition of identifier.

        Args:
            identifier: Name to look up.
            buffer_text: Text of the file being edited, searched first.
            workspace_root: Directory searched when the buffer has no hit.
            file_extensions: Globs restricting the workspace search.
            current_file: Path the buffer came from; excluded from the
                workspace results and used as the path of a buffer hit.
            cancel: Set by the caller to abandon the search.
            timeout: Overall limit in seconds; expiry behaves like cancel.

        Returns:
            Locations, at most one per file. Empty when nothing was found
            or the search was cancelled.

        Raises:
            LocatorError: If the workspace must be searched with the engine
                but no workspace_root was given. The fallback scan logs and
                returns an empty list instead.
        """
        identifier = (identifier or "").strip()
        if not identifier:
            return []

        cancel = cancel or threading.Event()
        timer = None
        if timeout is not None:
            timer = threading.Timer(timeout, cancel.set)
            timer.daemon = True
            timer.start()

        try:
            if not self.engine.is_available():
                self.logger.info(
                    f"{self.engine.name} not available, using fallback line scan"
                )
                return self._locate_fallback(
                    identifier, buffer_text, workspace_root, file_extensions, current_file, cancel
                )
            try:
                return self._locate_with_engine(
                    identifier, buffer_text, workspace_root, file_extensions, current_file, cancel
                )
            except EngineUnavailable as e:
                self.logger.warning(f"{e}; using fallback line scan")
                return self._locate_fallback(
                    identifier, buffer_text, workspace_root, file_extensions, current_file, cancel
                )
        finally:
            if timer is not None:
                timer.cancel()

    def find_in_text(self, identifier: str, text: str) -> list[Match]:
        """Search only the given text; return zero or one match."""
        identifier = (identifier or "").strip()
        if not identifier or not text:
            return []
        if self.engine.is_available():
            try:
                source = BufferSource(text)
                best = resolve(self._search_all(build_patterns(identifier), source, threading.Event()))
                return [best] if best else []
            except EngineUnavailable as e:
                self.logger.warning(f"{e}; using fallback line scan")
        best = resolve(self.fallback.scan_text(identifier, text, BUFFER_PATH))
        return [best] if best else []

    def _locate_with_engine(self, identifier, buffer_text, workspace_root, file_extensions,
                            current_file, cancel) -> list[Location]:
        patterns = build_patterns(identifier)

        if buffer_text:
            self.logger.debug(f"Looking for definition of '{identifier}' in current buffer")
            best = resolve(self._search_all(patterns, BufferSource(buffer_text), cancel))
            if cancel.is_set():
                return []
            if best is not None:
                self.logger.debug(f"Found {best.kind.value} at line {best.line_index + 1}")
                return [Location.from_match(best, _buffer_path(current_file))]

        root = self._require_root(workspace_root)
        globs = tuple(file_extensions or DEFAULT_EXTENSIONS)
        self.logger.debug(
            f"Not found in current buffer, searching {root} in: {', '.join(globs)}"
        )
        source = DirectorySource(root=root, globs=globs, skip_dirs=self.skip_dirs)
        matches = self._search_all(patterns, source, cancel)
        if cancel.is_set():
            return []
        return self._to_locations(resolve_per_file(matches), current_file)

    def _locate_fallback(self, identifier, buffer_text, workspace_root, file_extensions,
                         current_file, cancel) -> list[Location]:
        if buffer_text:
            best = resolve(self.fallback.scan_text(identifier, buffer_text, BUFFER_PATH))
            if cancel.is_set():
                return []
            if best is not None:
                return [Location.from_match(best, _buffer_path(current_file))]

        if workspace_root is None:
            # Degraded mode has nothing left to try
            self.logger.warning("Fallback search skipped: no workspace root to search")
            return []
        root = Path(workspace_root)
        globs = file_extensions or DEFAULT_EXTENSIONS
        try:
            matches = self.fallback.scan_directory(
                identifier, root, globs, self.skip_dirs, cancel=cancel
            )
        except LocatorError as e:
            self.logger.warning(f"Fallback search failed: {e}")
            return []
        if cancel.is_set():
            return []
        return self._to_locations(matches, current_file)

    def _search_all(self, patterns: list[PatternEntry], source: Source,
                    cancel: threading.Event) -> list[Match]:
        """Run every pattern against source and pool the normalized matches.

        Patterns run concurrently, but results are pooled in catalog order so
        the outcome never depends on which search finished first.
        """
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = [
                pool.submit(self.engine.search, entry.pattern, source, cancel)
                for entry in patterns
            ]
            results = [future.result() for future in futures]

        pooled = []
        for entry, result in zip(patterns, results):
            if result.status is SearchStatus.UNAVAILABLE:
                raise EngineUnavailable(result.error)
            if result.status is SearchStatus.CANCELLED:
                self.logger.debug(f"Search for {entry.kind.value} cancelled")
                continue
            if not result.success:
                # One failed pattern does not abort the others
                self.logger.warning(f"Search for {entry.kind.value} failed: {result.error}")
                continue
            pooled.extend(normalize_all(result.events, entry.kind))
        return pooled

    def _require_root(self, workspace_root) -> Path:
        if workspace_root is None:
            raise LocatorError("No workspace root to search")
        return Path(workspace_root)

    def _to_locations(self, matches: list[Match], current_file) -> list[Location]:
        """Drop the current file, dedup by (file, line), order by file path."""
        excluded = _same_file_key(current_file) if current_file else None
        seen = set()
        locations = []
        for match in matches:
            if excluded is not None and _same_file_key(match.file_path) == excluded:
                continue
            key = (match.file_path, match.line_index)
            if key in seen:
                continue
            seen.add(key)
            locations.append(Location.from_match(match))
            self.logger.debug(
                f"Found {match.kind.value} in {match.file_path} at line {match.line_index + 1}"
            )
        locations.sort(key=lambda loc: loc.file_path)
        return locations


def _buffer_path(current_file) -> str:
    return str(current_file) if current_file else BUFFER_PATH


def _same_file_key(path) -> str:
    return str(Path(path).resolve())
