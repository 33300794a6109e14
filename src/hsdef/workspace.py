"""Workspace management - project root discovery and source file enumeration."""

import fnmatch
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional


WORKSPACE_DIR = ".hsdef"

# Files or directories that mark the root of a Haskell project
ROOT_MARKERS = (WORKSPACE_DIR, "cabal.project", "stack.yaml", "package.yaml", ".git")

DEFAULT_SKIP_DIRS = frozenset({
    "dist", "dist-newstyle", ".stack-work", "node_modules", "__pycache__", ".git",
})


class WorkspaceError(Exception):
    """Workspace-related errors."""
    pass


def _is_project_root(path: Path) -> bool:
    if any((path / marker).exists() for marker in ROOT_MARKERS):
        return True
    return any(path.glob("*.cabal"))


def iter_source_files(
    root: Path,
    globs: Iterable[str],
    skip_dirs: Iterable[str] = DEFAULT_SKIP_DIRS,
) -> Iterator[Path]:
    """Yield files under root whose name matches one of the globs.

    Directories are walked in sorted order so results are deterministic.
    Hidden files and directories are skipped, as are directories named in
    skip_dirs. Ignore files such as .gitignore are not read.

    Args:
        root: Directory to walk.
        globs: File name patterns such as "*.hs".
        skip_dirs: Directory names to skip.

    Yields:
        Matching file paths.
    """
    patterns = list(globs)
    skipped = set(skip_dirs)

    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            d for d in dirnames if not d.startswith(".") and d not in skipped
        )
        for name in sorted(filenames):
            if name.startswith("."):
                continue
            if any(fnmatch.fnmatch(name, p) for p in patterns):
                yield Path(dirpath) / name


class Workspace:
    """Locates the project root that cross-file searches run in."""

    def __init__(self, root: Optional[Path] = None, start: Optional[Path] = None):
        """Initialize workspace.

        Args:
            root: Workspace root directory. If None, searches upwards from
                `start` (default: the current directory) for a project marker.
            start: Directory to start the upward search from.
        """
        self.root: Optional[Path] = None
        self.config_dir: Optional[Path] = None

        if root:
            self.root = Path(root).resolve()
            self.config_dir = self.root / WORKSPACE_DIR
        else:
            self._find_workspace(Path(start) if start else Path.cwd())

    def _find_workspace(self, start: Path) -> None:
        """Search for a project marker in start or its parents."""
        current = start.resolve()
        if current.is_file():
            current = current.parent

        for candidate in (current, *current.parents):
            if _is_project_root(candidate):
                self.root = candidate
                self.config_dir = candidate / WORKSPACE_DIR
                return

    @property
    def is_initialized(self) -> bool:
        """Check if a workspace root is known."""
        return self.root is not None

    @property
    def local_config_path(self) -> Optional[Path]:
        """Path to local config file."""
        if self.config_dir:
            return self.config_dir / "config.toml"
        return None

    @staticmethod
    def global_config_dir() -> Path:
        """Get global config directory (cross-platform)."""
        # Windows: %APPDATA%\hsdef, otherwise ~/.hsdef
        if os.name == 'nt':
            appdata = os.environ.get('APPDATA')
            if appdata:
                return Path(appdata) / "hsdef"
        return Path.home() / WORKSPACE_DIR

    @staticmethod
    def global_config_path() -> Path:
        """Path to global config file."""
        return Workspace.global_config_dir() / "config.toml"

    def init(self, path: Optional[Path] = None) -> Path:
        """Initialize a workspace by creating .hsdef/config.toml.

        Args:
            path: Directory to initialize. Defaults to current directory.

        Returns:
            Path to the initialized workspace root.

        Raises:
            WorkspaceError: If path is an existing file.
        """
        root = Path(path).resolve() if path else Path.cwd().resolve()
        if root.exists() and not root.is_dir():
            raise WorkspaceError(f"Not a directory: {root}")
        config_dir = root / WORKSPACE_DIR
        config_dir.mkdir(parents=True, exist_ok=True)

        local_config = config_dir / "config.toml"
        if not local_config.exists():
            local_config.write_text("""# hsdef local configuration
# Overrides the global config for this project

[search]
# engine = "ripgrep"   # or "python"
# timeout = 5.0

[languages]
# haskell = ["*.hs", "*.lhs"]

[workspace]
# skip_dirs = ["dist-newstyle", ".stack-work"]
""", encoding='utf-8')

        self.root = root
        self.config_dir = config_dir
        return root

    def relative_path(self, path: Path) -> str:
        """Get path relative to workspace root for display."""
        if not self.root:
            return str(path)

        try:
            return str(Path(path).relative_to(self.root))
        except ValueError:
            return str(path)
