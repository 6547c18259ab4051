# ui/formatting.py
"""
Turn a raw model reply into display segments.

    format_response('{"response": "### Plan\\n- a\\n- **b**"}')
    -> [Header("Plan"), Bullet("a"), Bullet("b")]

Everything here is pure and never raises; anything odd degrades to paragraphs.
"""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import List, Union

BULLET = "• "

_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_EMPHASIS = re.compile(r"\*\*(.*?)\*\*")
_BULLET_MARKER = re.compile(r"^[-*] ", re.MULTILINE)
_HEADING = re.compile(r"^#{1,6}\s+(.*)$")


@dataclass(frozen=True)
class Header:
    text: str


@dataclass(frozen=True)
class Bullet:
    text: str


@dataclass(frozen=True)
class Paragraph:
    text: str


DisplaySegment = Union[Header, Bullet, Paragraph]


def _unwrap(raw: str) -> str:
    try:
        parsed = json.loads(raw)
    except (ValueError, TypeError):
        return raw
    if isinstance(parsed, dict) and isinstance(parsed.get("response"), str):
        return parsed["response"]
    return raw


def normalize_response(raw: str | None) -> str:
    """Unwrap a JSON envelope, collapse blank runs, drop ** and normalize bullet markers."""
    text = _unwrap(raw or "")
    text = text.replace("\r\n", "\n")
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    text = _EMPHASIS.sub(r"\1", text)
    return _BULLET_MARKER.sub(BULLET, text)


def _classify(line: str) -> DisplaySegment | None:
    line = line.rstrip()
    if not line.strip():
        return None
    m = _HEADING.match(line)
    if m and m.group(1).strip():
        return Header(m.group(1).strip())
    if line.startswith(BULLET):
        return Bullet(line[len(BULLET):])
    return Paragraph(line)


def format_response(raw: str | None) -> List[DisplaySegment]:
    segments: List[DisplaySegment] = []
    for line in normalize_response(raw).split("\n"):
        seg = _classify(line)
        if seg is not None:
            segments.append(seg)
    return segments


def render_text(segments: List[DisplaySegment]) -> str:
    """Canonical text form; feeding it back to format_response yields the same segments."""
    lines: List[str] = []
    for seg in segments:
        if isinstance(seg, Header):
            lines.append(f"### {seg.text}")
        elif isinstance(seg, Bullet):
            lines.append(f"{BULLET}{seg.text}")
        else:
            lines.append(seg.text)
    return "\n".join(lines)


def render_markdown(segments: List[DisplaySegment]) -> str:
    """Markdown for the chat widget: headers as ###, bullets kept as •, blank line between blocks."""
    blocks: List[str] = []
    bullets: List[str] = []

    def _flush() -> None:
        if bullets:
            blocks.append("  \n".join(bullets))
            bullets.clear()

    for seg in segments:
        if isinstance(seg, Bullet):
            bullets.append(f"{BULLET}{seg.text}")
            continue
        _flush()
        if isinstance(seg, Header):
            blocks.append(f"### {seg.text}")
        else:
            blocks.append(seg.text.strip())
    _flush()
    return "\n\n".join(blocks)


def speakable_text(raw: str | None) -> str:
    """Plain text for speech synthesis (markers stripped, one segment per sentence run)."""
    parts = [seg.text.strip() for seg in format_response(raw)]
    return " ".join(p for p in parts if p)
