"""Turn raw search events into Match records."""

import base64
import json
import os
import re
from typing import Optional

from hsdef.models import BUFFER_PATH, Match, RawMatchEvent
from hsdef.patterns import DefinitionKind

_LINE_BREAK = re.compile(r"\r?\n")


def _decode_text(value: Optional[dict]) -> Optional[str]:
    """Read ripgrep's {"text": ...} / {"bytes": <base64>} wrapper."""
    if not isinstance(value, dict):
        return None
    if "text" in value:
        return value["text"]
    if "bytes" in value:
        return base64.b64decode(value["bytes"]).decode("utf-8", errors="replace")
    return None


def _decode_path(value: Optional[dict]) -> Optional[str]:
    if isinstance(value, dict) and "bytes" in value:
        # Non UTF-8 file names are sent as raw bytes
        return os.fsdecode(base64.b64decode(value["bytes"]))
    return _decode_text(value)


def parse_ripgrep_json(output: str, from_buffer: bool = False) -> list[RawMatchEvent]:
    """Parse ripgrep ``--json`` output into match events.

    Only records of type "match" are kept. Lines that are not valid JSON,
    or match records without a line number, are dropped.

    Args:
        output: Standard output of an ``rg --json`` run.
        from_buffer: The search read standard input, so the reported path
            ("<stdin>") is not a real file.

    Returns:
        Events in output order.
    """
    events = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            record = json.loads(line)
            if record.get("type") != "match":
                continue
            data = record["data"]
            line_number = data["line_number"]
            if not isinstance(line_number, int):
                continue
            text = _decode_text(data.get("lines")) or ""
            path = None if from_buffer else _decode_path(data.get("path"))
        except (ValueError, KeyError, TypeError, AttributeError):
            continue
        events.append(RawMatchEvent(path=path, line_number=line_number, text=text))
    return events


def split_lines(text: str) -> list[str]:
    """Split a matched span into physical lines, ignoring one trailing break."""
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    return _LINE_BREAK.split(text)


def normalize(event: RawMatchEvent, kind: DefinitionKind) -> Match:
    """Pick the line of a (possibly multi-line) match that names the definition.

    Constructors are declared at the end of the span, after the `data` line
    and any continuation lines, so the last line is selected. Every other
    kind starts with the defined name, so the first line is selected.
    """
    lines = split_lines(event.text)
    offset = len(lines) - 1 if kind is DefinitionKind.CONSTRUCTOR else 0
    return Match(
        kind=kind,
        file_path=event.path if event.path is not None else BUFFER_PATH,
        line_index=max(0, event.line_number - 1 + offset),
        line_text=lines[offset],
    )


def normalize_all(events: list[RawMatchEvent], kind: DefinitionKind) -> list[Match]:
    return [normalize(event, kind) for event in events]
