"""User configuration management."""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Python 3.11+ has tomllib built-in, older versions need tomli
if sys.version_info >= (3, 11):
    import tomllib as tomli
else:
    import tomli

from loguru import logger as default_logger

from hsdef.models import DEFAULT_EXTENSIONS
from hsdef.workspace import DEFAULT_SKIP_DIRS, Workspace

ENGINE_NAMES = ("ripgrep", "python")


def _default_languages() -> dict[str, list[str]]:
    return {"haskell": list(DEFAULT_EXTENSIONS)}


@dataclass
class ConfigSource:
    """Track where a config value came from."""
    global_config: Optional[Path] = None
    local_config: Optional[Path] = None
    loaded_from: str = "default"  # "default", "global", "local", "env"
    errors: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        parts = []
        if self.global_config:
            parts.append(f"Global: {self.global_config}")
        if self.local_config:
            parts.append(f"Local: {self.local_config}")
        parts.append(f"Active: {self.loaded_from}")
        if self.errors:
            parts.append(f"Errors: {', '.join(self.errors)}")
        return " | ".join(parts)


@dataclass
class Config:
    """hsdef configuration."""

    # Search settings
    engine: str = "ripgrep"  # "ripgrep" or "python"
    ripgrep_path: str = "rg"
    search_timeout: float = 5.0
    max_workers: int = 4

    # Language id -> file globs searched for that language
    languages: dict[str, list[str]] = field(default_factory=_default_languages)

    # Workspace settings
    skip_dirs: list[str] = field(default_factory=lambda: sorted(DEFAULT_SKIP_DIRS))

    # Debug settings
    debug: bool = False

    # Config source tracking (not loaded from file)
    _source: ConfigSource = field(default_factory=ConfigSource)

    def extensions_for(self, language: str) -> list[str]:
        """File globs for a language; ["*.hs"] when the language is not mapped."""
        return list(self.languages.get(language) or DEFAULT_EXTENSIONS)

    @classmethod
    def load(cls, workspace: Optional[Workspace] = None, logger=None) -> "Config":
        """Load configuration from files and environment.

        Load order (later overrides earlier):
        1. Global config (~/.hsdef/config.toml or %APPDATA%/hsdef/config.toml)
        2. Local config (.hsdef/config.toml in the workspace root)
        3. Environment variables

        A file that fails to load is skipped; the error is kept in the
        config source and logged as a warning.

        Args:
            workspace: Optional workspace for local config lookup.
            logger: Receives config loading diagnostics (default: loguru).
        """
        logger = logger or default_logger
        config = cls()
        config._source = ConfigSource()

        layers = [("global", cls.get_global_config_path())]
        if workspace and workspace.is_initialized and workspace.local_config_path:
            layers.append(("local", workspace.local_config_path))

        for layer, path in layers:
            if not path.exists():
                logger.debug(f"No {layer} config at: {path}")
                continue
            success, error = config._load_from_file(path)
            if not success:
                config._source.errors.append(f"{layer}: {error}")
                logger.warning(f"Error loading {layer} config {path}: {error}")
                continue
            setattr(config._source, f"{layer}_config", path)
            config._source.loaded_from = layer
            logger.debug(f"Loaded {layer} config: {path}")

        env_overrides = config._load_from_env()
        if env_overrides:
            config._source.loaded_from = "env"
            logger.debug(f"Env overrides: {', '.join(env_overrides)}")

        return config

    @classmethod
    def get_global_config_path(cls) -> Path:
        """Get the global config path for the current platform."""
        return Workspace.global_config_path()

    def show_config_info(self) -> str:
        """Return a summary of current config and sources."""
        lines = [
            "Configuration:",
            f"  Engine: {self.engine}",
            f"  ripgrep: {self.ripgrep_path}",
            f"  Timeout: {self.search_timeout}s",
            f"  Workers: {self.max_workers}",
            f"  Skip dirs: {', '.join(self.skip_dirs) or '(none)'}",
            "  Languages:",
        ]
        for language, globs in sorted(self.languages.items()):
            lines.append(f"    {language}: {', '.join(globs)}")
        lines.extend(["", "Sources:"])
        if self._source.global_config:
            lines.append(f"  Global: {self._source.global_config}")
        else:
            lines.append(f"  Global: (not found at {self.get_global_config_path()})")
        if self._source.local_config:
            lines.append(f"  Local: {self._source.local_config}")
        else:
            lines.append("  Local: (none)")
        lines.append(f"  Active source: {self._source.loaded_from}")
        if self._source.errors:
            lines.append(f"  Errors: {', '.join(self._source.errors)}")
        return "\n".join(lines)

    def _load_from_file(self, path: Path) -> tuple[bool, str]:
        """Load configuration from a TOML file.

        Returns:
            Tuple of (success: bool, error_message: str)
        """
        try:
            with open(path, "rb") as f:
                data = tomli.load(f)

            if "search" in data:
                search = data["search"]
                if "engine" in search and search["engine"]:
                    engine = str(search["engine"])
                    if engine not in ENGINE_NAMES:
                        return False, f"Unknown engine: {engine}"
                    self.engine = engine
                if "ripgrep_path" in search and search["ripgrep_path"]:
                    self.ripgrep_path = str(search["ripgrep_path"])
                if "timeout" in search:
                    self.search_timeout = float(search["timeout"])
                if "max_workers" in search:
                    self.max_workers = int(search["max_workers"])

            # Languages merge over the defaults, one entry per language id
            if "languages" in data:
                for language, globs in data["languages"].items():
                    if isinstance(globs, str):
                        globs = [globs]
                    self.languages[language] = [str(g) for g in globs]

            if "workspace" in data:
                ws = data["workspace"]
                if "skip_dirs" in ws:
                    self.skip_dirs = [str(d) for d in ws["skip_dirs"]]

            if "debug" in data:
                self.debug = bool(data["debug"])

            return True, ""

        except FileNotFoundError:
            return False, f"File not found: {path}"
        except (tomli.TOMLDecodeError, OSError, TypeError, ValueError, AttributeError) as e:
            return False, str(e)

    def _load_from_env(self) -> list[str]:
        """Load configuration from environment variables.

        Returns:
            List of environment variables that were applied.
        """
        overrides = []

        if engine := os.environ.get("HSDEF_ENGINE"):
            if engine in ENGINE_NAMES:
                self.engine = engine
                overrides.append("HSDEF_ENGINE")
        if rg_path := os.environ.get("HSDEF_RG_PATH"):
            self.ripgrep_path = rg_path
            overrides.append("HSDEF_RG_PATH")
        if timeout := os.environ.get("HSDEF_SEARCH_TIMEOUT"):
            try:
                self.search_timeout = float(timeout)
                overrides.append("HSDEF_SEARCH_TIMEOUT")
            except ValueError:
                pass
        if workers := os.environ.get("HSDEF_MAX_WORKERS"):
            try:
                self.max_workers = int(workers)
                overrides.append("HSDEF_MAX_WORKERS")
            except ValueError:
                pass
        if os.environ.get("HSDEF_DEBUG", "").lower() in ("1", "true", "yes"):
            self.debug = True
            overrides.append("HSDEF_DEBUG")

        return overrides
