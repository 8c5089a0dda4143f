"""Message → StyledText layout.

Layout of one rendered message:

    {
      <op> <result> <key>
      reqid: 0x<hex>
      flags: 0x<hex> [DESC, DESC]
      exptime: <dec>
      value size: <size text>
      value: <formatted value>
    }

Header tokens, the flag description list, exptime and the value section are
each omitted when their source field is absent.

// [LAW:dataflow-not-control-flow] Rendering is a pure function of (message, context).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from mcpiper.core.escape import backslashify
from mcpiper.core.flags import FlagDecoder, McFlagDecoder
from mcpiper.core.messages import McMessage, McOp, McResult
from mcpiper.core.styled_text import StyledText
from mcpiper.core.value_formatter import McValueFormatter, ValueFormatter
from mcpiper.palette import ColorScheme, default_scheme


@dataclass(frozen=True)
class RenderContext:
    """Startup-resolved, read-only inputs shared by every render."""

    scheme: ColorScheme = field(default_factory=default_scheme)
    quiet: bool = False
    value_formatter: ValueFormatter = field(default_factory=McValueFormatter)
    flag_decoder: FlagDecoder = field(default_factory=McFlagDecoder)


def message_header(msg: McMessage) -> str:
    """Space-separated op, result and escaped key; empty when all are absent."""
    tokens = []
    if msg.op is not McOp.UNKNOWN:
        tokens.append(msg.op.value)
    if msg.result is not McResult.UNKNOWN:
        tokens.append(msg.result.value)
    if msg.key:
        tokens.append(backslashify(msg.key))
    return " ".join(tokens)


def value_size_text(raw_size: int, uncompressed_size: int) -> str:
    if uncompressed_size != raw_size and uncompressed_size > 0:
        savings = 100.0 - 100.0 * raw_size / uncompressed_size
        return "{} uncompressed, {} compressed, {:.2f}% savings".format(
            uncompressed_size, raw_size, savings
        )
    return str(raw_size)


def _render_flags(msg: McMessage, ctx: RenderContext, out: StyledText) -> None:
    scheme = ctx.scheme
    out.append("  flags: ", scheme.msg_attr)
    out.append("0x{:x}".format(msg.flags), scheme.data_value)
    if not msg.flags:
        return
    descriptions = ctx.flag_decoder.describe(msg.flags)
    if not descriptions:
        return
    out.push_color(scheme.attr)
    out.append(" [")
    out.append(", ".join(descriptions))
    out.append("]")
    out.pop_color()


def _render_value(msg: McMessage, ctx: RenderContext, out: StyledText) -> None:
    scheme = ctx.scheme
    value = msg.value
    formatted, uncompressed_size = ctx.value_formatter.format(value, msg.flags, scheme)

    out.append("  value size: ", scheme.msg_attr)
    out.append(value_size_text(len(value), uncompressed_size), scheme.data_value)
    if not ctx.quiet:
        out.append("\n  value: ", scheme.msg_attr)
        out.append_styled(formatted)
    out.append("\n")


def render_message(msg: McMessage, ctx: RenderContext) -> StyledText | None:
    """Render one message; None for the end-of-stream lifecycle marker."""
    if msg.is_end:
        return None

    scheme = ctx.scheme
    out = StyledText()
    out.append("{\n", scheme.data_op)

    header = message_header(msg)
    if header:
        out.append("  ")
        out.append(header, scheme.header)
        out.append("\n")

    out.append("  reqid: ", scheme.msg_attr)
    out.append("0x{:x}".format(msg.reqid), scheme.data_value)
    out.append("\n")
    _render_flags(msg, ctx, out)
    out.append("\n")
    if msg.exptime:
        out.append("  exptime: ", scheme.msg_attr)
        out.append("{:d}".format(msg.exptime), scheme.data_value)
        out.append("\n")

    if msg.value:
        _render_value(msg, ctx, out)

    out.append("}\n", scheme.data_op)
    return out


class MessageRenderer:
    """Callable renderer bound to one RenderContext."""

    def __init__(self, context: RenderContext):
        self.context = context

    def __call__(self, msg: McMessage) -> StyledText | None:
        return render_message(msg, self.context)
