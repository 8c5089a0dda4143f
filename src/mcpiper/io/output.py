"""Output sink: writes rendered messages to a color-capable stream.

All trace output goes through here. Each message is flushed as soon as it is
written so the tool behaves as a live tail over a slow, unbounded stream.
"""

from __future__ import annotations

from typing import IO

from rich.console import Console
from rich.text import Text

from mcpiper.core.styled_text import StyledText

COLOR_MODES = ("auto", "always", "never")


def make_console(color_mode: str = "auto", file: IO[str] | None = None) -> Console:
    """Build the destination console.

    auto: color only when the stream is a terminal (rich detection, NO_COLOR
    honoured). always: emit styling even into pipes. never: plain text.
    """
    if color_mode not in COLOR_MODES:
        raise ValueError(f"color mode must be one of {COLOR_MODES}, got {color_mode!r}")
    kwargs = {"file": file, "highlight": False, "emoji": False}
    if color_mode == "always":
        kwargs["force_terminal"] = True
    elif color_mode == "never":
        kwargs["color_system"] = None
    return Console(**kwargs)


def to_rich_text(styled: StyledText) -> Text:
    """Translate StyledText runs into a rich Text, one span per run."""
    text = Text(no_wrap=True, end="")
    for run in styled.runs:
        text.append(run.text, style=run.color)
    return text


class OutputSink:
    """Single-destination sink. Consumes each StyledText exactly once."""

    def __init__(self, console: Console):
        self.console = console
        self.written = 0

    def write(self, styled: StyledText) -> None:
        if styled.sealed:
            raise RuntimeError("StyledText already written")
        self.console.print(to_rich_text(styled), end="", soft_wrap=True)
        self.console.file.flush()
        styled.seal()
        self.written += 1
