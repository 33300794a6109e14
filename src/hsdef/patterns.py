"""Definition pattern catalog.

Each pattern is written in the regex subset shared by ripgrep's default
engine and Python's ``re`` module: no look-around, multi-line mode, and
``\\r?\\n`` for line breaks so CRLF files match too.
"""

import re
from enum import Enum
from typing import NamedTuple


class DefinitionKind(Enum):
    """Kinds of definition site, from most to least authoritative."""
    SIGNATURE_SAME_LINE = "signature_same_line"
    SIGNATURE_NEXT_LINE = "signature_next_line"
    ASSIGNMENT = "assignment"
    DATA_DECL = "data_decl"
    TYPE_DECL = "type_decl"
    NEWTYPE_DECL = "newtype_decl"
    CLASS_DECL = "class_decl"
    CONSTRUCTOR = "constructor"
    TYPE_FAMILY = "type_family"
    DATA_FAMILY = "data_family"
    PATTERN_SYNONYM = "pattern_synonym"

    @property
    def priority(self) -> int:
        """Position in catalog order (0 is the most authoritative)."""
        return _PRIORITY[self]

    @property
    def is_signature(self) -> bool:
        return self in (DefinitionKind.SIGNATURE_SAME_LINE, DefinitionKind.SIGNATURE_NEXT_LINE)


_PRIORITY = {kind: index for index, kind in enumerate(DefinitionKind)}


class PatternEntry(NamedTuple):
    kind: DefinitionKind
    pattern: str


# Identifier is not followed by another identifier character. `'` counts,
# so `foo` does not match `foo'`.
_END = r"(?:[^\w'\n]|$)"

# Lines of a `data` declaration: the `data` line itself, then any indented
# continuation lines. A line at column 0 ends the declaration.
_DATA_BODY = r"^data[ \t][^\n]*?(?:\r?\n[ \t][^\n]*?)*?"

DEFINITION_PATTERNS = [
    (DefinitionKind.SIGNATURE_SAME_LINE, r"^{symbol}[ \t]*::"),
    (DefinitionKind.SIGNATURE_NEXT_LINE, r"^{symbol}[ \t]*\r?\n[ \t]*::"),
    (DefinitionKind.ASSIGNMENT, r"^{symbol}[ \t]*=(?:[^=\n]|$)"),
    (DefinitionKind.DATA_DECL, r"^data[ \t]+{symbol}" + _END),
    (DefinitionKind.TYPE_DECL, r"^type[ \t]+{symbol}" + _END),
    (DefinitionKind.NEWTYPE_DECL, r"^newtype[ \t]+{symbol}" + _END),
    (DefinitionKind.CLASS_DECL, r"^class[ \t]+(?:[^\n=]*=>[ \t]*)?{symbol}" + _END),
    (DefinitionKind.CONSTRUCTOR, _DATA_BODY + r"[=|][ \t]*(?:\r?\n[ \t]+)?{symbol}" + _END),
    (DefinitionKind.TYPE_FAMILY, r"^type[ \t]+family[ \t]+{symbol}" + _END),
    (DefinitionKind.DATA_FAMILY, r"^data[ \t]+family[ \t]+{symbol}" + _END),
    (DefinitionKind.PATTERN_SYNONYM, r"^pattern[ \t]+{symbol}[ \t]*::"),
]


def build_patterns(identifier: str) -> list[PatternEntry]:
    """Build the ordered pattern catalog for an identifier.

    The identifier is escaped, so operators such as ``<$>`` and qualified
    names such as ``Map.lookup`` are matched literally.

    Args:
        identifier: The name to look up.

    Returns:
        One PatternEntry per DefinitionKind, in priority order.
    """
    symbol = re.escape(identifier)
    return [
        PatternEntry(kind, "(?m)" + template.format(symbol=symbol))
        for kind, template in DEFINITION_PATTERNS
    ]
