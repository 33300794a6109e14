"""Search engine base class."""

import threading
import time
from abc import ABC, abstractmethod
from typing import Optional, Union

from loguru import logger as default_logger

from hsdef.models import BufferSource, DirectorySource, SearchResult

Source = Union[BufferSource, DirectorySource]


class Deadline:
    """Per-invocation time limit combined with a caller's cancel event."""

    def __init__(self, timeout: float, cancel: Optional[threading.Event] = None):
        self.timeout = timeout
        self.expires = time.monotonic() + timeout
        self.cancel = cancel

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    def remaining(self) -> float:
        return max(0.0, self.expires - time.monotonic())


class SearchEngine(ABC):
    """Runs one regex pattern against a buffer or a directory tree.

    To add an engine:
    1. Subclass SearchEngine
    2. Set name
    3. Implement search() and is_available()
    4. Register it in ENGINES in hsdef/engines/__init__.py
    """

    name: str = "base"

    def __init__(self, timeout: float = 5.0, logger=None):
        self.timeout = timeout
        self.logger = logger or default_logger

    @abstractmethod
    def search(
        self,
        pattern: str,
        source: Source,
        cancel: Optional[threading.Event] = None,
    ) -> SearchResult:
        """Search source for pattern in multi-line mode.

        Args:
            pattern: Regular expression from the pattern catalog.
            source: Buffer or directory to search.
            cancel: Set by the caller to abort the search.

        Returns:
            SearchResult; failures are reported through its status, never raised.
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Whether this engine can run in the current environment."""
        pass
