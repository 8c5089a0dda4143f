"""Pattern-match highlighting of rendered messages.

The pattern runs against the fully rendered text (attribute labels, hex
numbers and all), not just key/value. A message with no match is dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mcpiper.core.styled_text import Color, StyledText


@dataclass(frozen=True)
class MatchSpan:
    """A (offset, length) span into a StyledText's plain-text projection."""

    offset: int
    length: int


def match_all(text: str, pattern: re.Pattern) -> list[MatchSpan]:
    """All leftmost-first, non-overlapping matches of pattern in text.

    Empty matches are reported too: they count as a match (the message is
    shown) but leave nothing to recolor.
    """
    return [MatchSpan(m.start(), m.end() - m.start()) for m in pattern.finditer(text)]


def highlight(styled: StyledText, pattern: re.Pattern, color: Color) -> bool:
    """Overlay `color` on every match. Returns False when nothing matched.

    A False result means the message must be suppressed.
    """
    spans = match_all(styled.text, pattern)
    styled.overlay_spans([(span.offset, span.length) for span in spans], color)
    return bool(spans)
