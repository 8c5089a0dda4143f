"""Shared test harness for mcpiper.

Re-exports all public API for convenient imports:
    from tests.harness import make_message, make_context, ...
"""

from tests.harness.builders import (
    TEST_SCHEME,
    StubFlagDecoder,
    StubValueFormatter,
    line_texts,
    make_capture_console,
    make_context,
    make_message,
)

__all__ = [
    "TEST_SCHEME",
    "StubFlagDecoder",
    "StubValueFormatter",
    "line_texts",
    "make_capture_console",
    "make_context",
    "make_message",
]
