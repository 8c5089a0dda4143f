"""Render → highlight → output pipeline for decoded message events.

// [LAW:single-enforcer] The suppression decision lives here only.

One event in, at most one flushed block out. The pipeline is invoked
synchronously by whatever owns the event loop; it never queues or reorders.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol

from mcpiper.core.highlight import highlight
from mcpiper.core.messages import McMessage
from mcpiper.core.render import MessageRenderer, RenderContext
from mcpiper.io.output import OutputSink

logger = logging.getLogger(__name__)


class MessageConsumer(Protocol):
    def accept(self, msg: McMessage) -> None:
        """Process one decoded event to completion."""
        ...


class TracePipeline:
    """MessageConsumer that renders, filters/highlights and writes each event."""

    def __init__(
        self,
        context: RenderContext,
        sink: OutputSink,
        data_pattern: re.Pattern | None = None,
    ):
        self.context = context
        self.renderer = MessageRenderer(context)
        self.sink = sink
        self.data_pattern = data_pattern
        self.rendered = 0
        self.suppressed = 0

    @property
    def shown(self) -> int:
        return self.sink.written

    def accept(self, msg: McMessage) -> None:
        styled = self.renderer(msg)
        if styled is None:
            logger.debug("end-of-stream marker reqid=0x%x", msg.reqid)
            return
        self.rendered += 1

        if self.data_pattern is not None:
            if not highlight(styled, self.data_pattern, self.context.scheme.match):
                self.suppressed += 1
                return

        self.sink.write(styled)
