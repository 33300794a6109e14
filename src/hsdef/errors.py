"""Locator errors."""


class LocatorError(Exception):
    """Invalid request to the locator (e.g. no workspace root to search)."""
    pass


class ToolUnavailableError(LocatorError):
    """The external search engine cannot be invoked at all."""
    pass


class ToolExecutionError(LocatorError):
    """The external search engine ran but exited abnormally."""
    pass


class SearchTimeoutError(ToolExecutionError):
    """A single search invocation exceeded its deadline."""
    pass
