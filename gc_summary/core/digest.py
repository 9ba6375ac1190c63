"""Rendering of digest items into presentation text."""

import re
from typing import Iterable, List, Optional, Sequence

from .models import DigestItem, TierChange

NOTE_SEPARATOR = ", "
_TIER_LINE = re.compile(r"^  \[(?P<label>[^\]]+)\] (?P<notes>.*)$")


def format_item(title: str, changes: Sequence[TierChange]) -> str:
    """Render one record: title line, one line per tier change, trailing blank line."""
    lines = [title]
    for change in changes:
        lines.append(f"  [{change.tier_label}] {NOTE_SEPARATOR.join(change.notes)}")
    return "\n".join(lines) + "\n\n"


def render_item(item: DigestItem) -> str:
    return format_item(item.title, item.changes)


def chunk_renderings(renderings: Iterable[str], max_chunk_length: int) -> List[str]:
    """Greedily pack renderings into chunks of at most ``max_chunk_length``.

    A rendering is never split. One that is longer than the limit on its own
    becomes a chunk of its own and exceeds the limit.
    """
    chunks = []
    buffer = ""
    for rendering in renderings:
        if buffer and len(buffer) + len(rendering) > max_chunk_length:
            chunks.append(buffer.rstrip())
            buffer = ""
        buffer += rendering
    if buffer:
        chunks.append(buffer.rstrip())
    return chunks


def format_batch(items: Iterable[DigestItem], max_chunk_length: Optional[int] = None) -> List[str]:
    """Render a batch of items.

    Args:
        items: Digest items; empty ones are skipped
        max_chunk_length: Optional per-chunk size limit for length-limited transports

    Returns:
        A single digest text when no limit is given, otherwise the chunks.
        An empty batch yields an empty list.
    """
    renderings = [render_item(item) for item in items if not item.is_empty]
    if not renderings:
        return []
    if max_chunk_length is None:
        return ["".join(renderings).rstrip()]
    return chunk_renderings(renderings, max_chunk_length)


def format_digest(items: Iterable[DigestItem]) -> str:
    """Full digest text, or an empty string when nothing changed."""
    rendered = format_batch(items)
    return rendered[0] if rendered else ""


def parse_digest(text: str) -> List[DigestItem]:
    """Read rendered digest text back into digest items.

    Raises:
        ValueError: If a line under a title is not a tier line
    """
    items = []
    for block in re.split(r"\n\s*\n", text.lstrip("\n").rstrip()):
        if not block.strip():
            continue
        title, *tier_lines = block.split("\n")
        changes = []
        for line in tier_lines:
            match = _TIER_LINE.match(line)
            if not match:
                raise ValueError(f"Not a tier line: {line!r}")
            notes = tuple(match.group("notes").split(NOTE_SEPARATOR))
            changes.append(TierChange(tier_label=match.group("label"), notes=notes))
        items.append(DigestItem(title=title, changes=changes))
    return items
