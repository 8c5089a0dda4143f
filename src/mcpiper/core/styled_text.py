"""Styled text buffer: text runs with a color per character.

A StyledText is built append-style during rendering, then optionally
re-colored through overlays (match highlighting) and finally handed to the
output sink exactly once.

// [LAW:one-source-of-truth] `text` is derived from the runs; never stored apart.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

Color = str | None


@dataclass(frozen=True)
class Run:
    """A contiguous span of text sharing one color."""

    text: str
    color: Color = None


class StyledText:
    """Append-only, then overlay-mutable text with per-character colors.

    Invariant: ``len(self.text) == sum(len(r.text) for r in self.runs)`` and no
    two adjacent runs share a color (they are merged on every mutation).
    """

    def __init__(self, text: str = "", color: Color = None):
        self._runs: list[Run] = []
        self._length = 0
        self._color_stack: list[Color] = []
        self._sealed = False
        if text:
            self.append(text, color)

    # ── Read access ────────────────────────────────────────────────────

    @property
    def runs(self) -> tuple[Run, ...]:
        return tuple(self._runs)

    @property
    def text(self) -> str:
        """Plain-text projection (used for pattern matching)."""
        return "".join(run.text for run in self._runs)

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def current_color(self) -> Color:
        """Color used by append() when no explicit color is given."""
        return self._color_stack[-1] if self._color_stack else None

    def __len__(self) -> int:
        return self._length

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"StyledText({self._runs!r})"

    def color_at(self, offset: int) -> Color:
        """Color of the character at offset."""
        if not 0 <= offset < self._length:
            raise IndexError(f"offset {offset} out of range for length {self._length}")
        pos = 0
        for run in self._runs:
            if offset < pos + len(run.text):
                return run.color
            pos += len(run.text)
        raise AssertionError("run lengths out of sync with buffer length")

    # ── Append ─────────────────────────────────────────────────────────

    def append(self, text: str, color: Color = None) -> StyledText:
        """Append text in `color`, or in the current context color when None."""
        self._check_writable()
        if color is None:
            color = self.current_color
        self._append_run(text, color)
        return self

    def append_styled(self, other: StyledText) -> StyledText:
        """Append every run of `other` verbatim, keeping its colors."""
        self._check_writable()
        for run in other.runs:
            self._append_run(run.text, run.color)
        return self

    def _append_run(self, text: str, color: Color) -> None:
        if not text:
            return
        if self._runs and self._runs[-1].color == color:
            last = self._runs[-1]
            self._runs[-1] = Run(last.text + text, color)
        else:
            self._runs.append(Run(text, color))
        self._length += len(text)

    # ── Color context ──────────────────────────────────────────────────

    def push_color(self, color: Color) -> None:
        """Make `color` the default for subsequent appends until popped."""
        self._check_writable()
        self._color_stack.append(color)

    def pop_color(self) -> None:
        """Restore the previous default color.

        Popping an empty stack is a programming error: it fails the assertion
        in normal runs and is ignored under ``python -O``.
        """
        assert self._color_stack, "pop_color() without matching push_color()"
        if self._color_stack:
            self._color_stack.pop()

    # ── Overlay ────────────────────────────────────────────────────────

    def overlay(self, offset: int, length: int, color: Color) -> None:
        """Recolor ``[offset, offset + length)``; text is left unchanged.

        Last write wins on every character covered. Offsets always come from
        this object's own projection, so an out-of-range span is a caller bug.
        """
        self.overlay_spans([(offset, length)], color)

    def overlay_spans(self, spans: Iterable[tuple[int, int]], color: Color) -> None:
        """Recolor every ``(offset, length)`` span in one pass over the runs."""
        self._check_writable()
        bounds: list[tuple[int, int]] = []
        for offset, length in spans:
            end = offset + length
            if offset < 0 or length < 0 or end > self._length:
                raise ValueError(
                    f"overlay span [{offset}, {end}) out of range for length {self._length}"
                )
            if length:
                bounds.append((offset, end))
        if not bounds:
            return

        # Spans share one color, so overlapping ones collapse into their union
        bounds.sort()
        merged = [bounds[0]]
        for start, end in bounds[1:]:
            last_start, last_end = merged[-1]
            if start <= last_end:
                merged[-1] = (last_start, max(last_end, end))
            else:
                merged.append((start, end))

        pieces: list[tuple[str, Color]] = []
        pos = 0
        i = 0
        for run in self._runs:
            run_start, run_end = pos, pos + len(run.text)
            pos = run_end
            cursor = run_start
            while i < len(merged) and merged[i][0] < run_end:
                start, end = merged[i]
                lo = max(start, cursor)
                hi = min(end, run_end)
                pieces.append((run.text[cursor - run_start:lo - run_start], run.color))
                pieces.append((run.text[lo - run_start:hi - run_start], color))
                cursor = hi
                if end > run_end:
                    break
                i += 1
            pieces.append((run.text[cursor - run_start:], run.color))

        self._runs = _merge_pieces(pieces)

    # ── Lifecycle ──────────────────────────────────────────────────────

    def seal(self) -> None:
        """Mark as consumed. Further mutation raises RuntimeError."""
        self._sealed = True

    def _check_writable(self) -> None:
        if self._sealed:
            raise RuntimeError("StyledText already consumed by the output sink")


def _merge_pieces(pieces: Iterable[tuple[str, Color]]) -> list[Run]:
    """Join adjacent same-color pieces into runs, dropping empty ones."""
    runs: list[Run] = []
    texts: list[str] = []
    current: Color = None
    for text, color in pieces:
        if not text:
            continue
        if texts and color != current:
            runs.append(Run("".join(texts), current))
            texts = []
        current = color
        texts.append(text)
    if texts:
        runs.append(Run("".join(texts), current))
    return runs
