"""Search engines.

Provides:
- SearchEngine base class
- RipgrepEngine: external `rg` process (default)
- PythonEngine: in-process `re` search
"""

from hsdef.engines.base import Deadline, SearchEngine
from hsdef.engines.python_re import PythonEngine
from hsdef.engines.ripgrep import RipgrepEngine

ENGINES = {
    RipgrepEngine.name: RipgrepEngine,
    PythonEngine.name: PythonEngine,
}


def create_engine(name: str, timeout: float = 5.0, ripgrep_path: str = "rg", logger=None) -> SearchEngine:
    """Instantiate an engine by name.

    Raises:
        KeyError: If no engine has that name.
    """
    if name not in ENGINES:
        raise KeyError(f"Unknown engine: {name}")
    if name == RipgrepEngine.name:
        return RipgrepEngine(executable=ripgrep_path, timeout=timeout, logger=logger)
    return ENGINES[name](timeout=timeout, logger=logger)


__all__ = [
    "Deadline",
    "SearchEngine",
    "RipgrepEngine",
    "PythonEngine",
    "ENGINES",
    "create_engine",
]
