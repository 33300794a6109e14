"""Haskell identifier helpers."""

import re
from typing import Optional

from hsdef.normalize import split_lines

_WORD_CHARS = re.compile(r"[A-Za-z0-9_']")

# Lower-case names (functions and values), as used by the definition dump
_VALUE_IDENTIFIER = re.compile(r"(?<![\w'])[a-z][A-Za-z0-9_']*")

HASKELL_KEYWORDS = frozenset({
    "as", "case", "class", "data", "default", "deriving", "do", "else", "family",
    "forall", "foreign", "hiding", "if", "import", "in", "infix", "infixl", "infixr",
    "instance", "let", "module", "newtype", "of", "pattern", "qualified", "then",
    "type", "where",
})


def word_at(text: str, line: int, column: int) -> Optional[str]:
    """Return the identifier at a 0-based (line, column) position.

    A position just past the end of an identifier still selects it, so a
    cursor placed after the last character works.
    """
    lines = split_lines(text) if text else []
    if line < 0 or line >= len(lines):
        return None
    current = lines[line]
    if column < 0 or column > len(current):
        return None

    start = column
    if start == len(current) or not _WORD_CHARS.match(current[start]):
        # Only the character before the cursor can still be part of a word
        if start == 0 or not _WORD_CHARS.match(current[start - 1]):
            return None
        start -= 1

    while start > 0 and _WORD_CHARS.match(current[start - 1]):
        start -= 1
    end = start
    while end < len(current) and _WORD_CHARS.match(current[end]):
        end += 1

    word = current[start:end]
    # Identifiers start with a letter or underscore
    while word and not (word[0].isalpha() or word[0] == "_"):
        word = word[1:]
    return word or None


def iter_identifiers(text: str, skip_keywords: bool = True) -> list[str]:
    """Distinct lower-case identifiers in order of first occurrence."""
    seen = {}
    for match in _VALUE_IDENTIFIER.finditer(text):
        if skip_keywords and match.group(0) in HASKELL_KEYWORDS:
            continue
        seen.setdefault(match.group(0), None)
    return list(seen)
