"""Haskell definition locator.

Provides:
- DefinitionLocator: buffer-then-workspace definition search
- build_patterns / DefinitionKind: the definition pattern catalog
- Config: TOML configuration
"""

__version__ = "0.1.0"

from hsdef.config import Config
from hsdef.locator import DefinitionLocator
from hsdef.models import BUFFER_PATH, Location, Match
from hsdef.patterns import DefinitionKind, build_patterns

__all__ = [
    "__version__",
    "Config",
    "DefinitionLocator",
    "DefinitionKind",
    "Location",
    "Match",
    "BUFFER_PATH",
    "build_patterns",
]
