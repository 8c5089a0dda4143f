"""Unit tests for mcpiper.core.render: message layout rules."""

import pytest

from mcpiper.core.messages import McOp, McResult
from mcpiper.core.render import (
    MessageRenderer,
    RenderContext,
    message_header,
    render_message,
    value_size_text,
)
from tests.harness.builders import TEST_SCHEME, line_texts, make_context, make_message


def _render(msg, **ctx_kwargs):
    return render_message(msg, make_context(**ctx_kwargs))


def _runs_for(styled, text):
    return [run for run in styled.runs if text in run.text]


# ─── Header ──────────────────────────────────────────────────────────────────


HEADER_CASES = [
    pytest.param(dict(op=McOp.SET, key="k"), "set k", id="op_and_key"),
    pytest.param(dict(op=McOp.GET, result=McResult.FOUND, key="k"), "get mc_res_found k", id="all_three"),
    pytest.param(dict(result=McResult.NOTFOUND), "mc_res_notfound", id="result_only"),
    pytest.param(dict(key="a\\b\n"), "a\\\\b\\x0a", id="key_is_backslash_escaped"),
    pytest.param(dict(op=McOp.LEASE_GET, key=""), "lease-get", id="empty_key_omitted"),
    pytest.param(dict(), "", id="all_absent"),
]


@pytest.mark.parametrize("fields,expected", HEADER_CASES)
def test_message_header(fields, expected):
    assert message_header(make_message(**fields)) == expected


def test_header_line_rendered_with_indent_and_color():
    styled = _render(make_message(op=McOp.SET, key="k"))
    assert line_texts(styled)[1] == "  set k"
    assert _runs_for(styled, "set k")[0].color == TEST_SCHEME.header


def test_no_header_line_when_all_absent():
    styled = _render(make_message(reqid=0x10))
    assert line_texts(styled) == ["{", "  reqid: 0x10", "  flags: 0x0", "}"]


# ─── Block structure ─────────────────────────────────────────────────────────


def test_minimal_block_layout():
    styled = _render(make_message(op=McOp.GET, key="foo", reqid=255))
    assert styled.text == "{\n  get foo\n  reqid: 0xff\n  flags: 0x0\n}\n"


def test_block_delimiters_use_data_op_color():
    styled = _render(make_message(op=McOp.GET))
    assert styled.runs[0].text == "{\n"
    assert styled.runs[0].color == TEST_SCHEME.data_op
    assert styled.runs[-1].text == "}\n"
    assert styled.runs[-1].color == TEST_SCHEME.data_op


def test_attribute_label_and_value_colors():
    styled = _render(make_message(reqid=0xABC))
    label = _runs_for(styled, "reqid: ")[0]
    value = _runs_for(styled, "0xabc")[0]
    assert label.color == TEST_SCHEME.msg_attr
    assert value.color == TEST_SCHEME.data_value


def test_end_marker_renders_nothing():
    assert _render(make_message(op=McOp.END, key="k", value="v")) is None


# ─── Flags ───────────────────────────────────────────────────────────────────


def test_zero_flags_never_describe():
    ctx = make_context(descriptions=["NOREPLY"])
    styled = render_message(make_message(flags=0), ctx)
    assert "  flags: 0x0" in line_texts(styled)
    assert "[" not in styled.text
    assert ctx.flag_decoder.calls == []


def test_flags_with_descriptions():
    styled = _render(make_message(flags=5), descriptions=["NOREPLY", "COMPRESSED"])
    flags_line = [line for line in line_texts(styled) if "flags:" in line][0]
    assert flags_line == "  flags: 0x5 [NOREPLY, COMPRESSED]"
    assert flags_line.endswith(" [NOREPLY, COMPRESSED]")
    desc = _runs_for(styled, "[NOREPLY, COMPRESSED]")[0]
    assert desc.text == " [NOREPLY, COMPRESSED]"
    assert desc.color == TEST_SCHEME.attr


def test_flags_without_descriptions():
    styled = _render(make_message(flags=0x40000000), descriptions=[])
    assert "  flags: 0x40000000" in line_texts(styled)
    assert "[" not in styled.text


def test_default_decoder_describes_known_flags():
    styled = render_message(make_message(flags=0x3), RenderContext(scheme=TEST_SCHEME))
    assert "  flags: 0x3 [PHP_SERIALIZED, COMPRESSED]" in line_texts(styled)


# ─── Expiration ──────────────────────────────────────────────────────────────


def test_zero_exptime_omitted():
    assert "exptime" not in _render(make_message(exptime=0)).text


def test_exptime_rendered_in_decimal():
    assert "  exptime: 120" in line_texts(_render(make_message(exptime=120)))


# ─── Value block ─────────────────────────────────────────────────────────────


def test_value_block_layout():
    styled = _render(make_message(op=McOp.SET, key="k", value="hello"))
    assert line_texts(styled) == [
        "{",
        "  set k",
        "  reqid: 0x1",
        "  flags: 0x0",
        "  value size: 5",
        "  value: hello",
        "}",
    ]


def test_quiet_drops_value_line_only():
    styled = _render(make_message(value="hello"), quiet=True)
    lines = line_texts(styled)
    assert "  value size: 5" in lines
    assert not any(line.startswith("  value:") for line in lines)


def test_not_quiet_has_both_lines():
    lines = line_texts(_render(make_message(value="hello"), quiet=False))
    assert "  value size: 5" in lines
    assert "  value: hello" in lines


@pytest.mark.parametrize("value", [None, ""])
def test_absent_or_empty_value_has_no_value_section(value):
    ctx = make_context()
    styled = render_message(make_message(value=value), ctx)
    assert "value" not in styled.text
    assert ctx.value_formatter.calls == []


def test_compression_savings_text():
    styled = _render(make_message(value="x" * 50), uncompressed_size=100)
    assert "  value size: 100 uncompressed, 50 compressed, 50.00% savings" in line_texts(styled)


def test_formatter_receives_raw_bytes_and_flags():
    ctx = make_context()
    render_message(make_message(value="abc", flags=0x2), ctx)
    assert ctx.value_formatter.calls == [(b"abc", 0x2)]


def test_formatted_value_styling_preserved():
    styled = _render(make_message(value="hello"))
    assert _runs_for(styled, "hello")[0].color == "green"


@pytest.mark.parametrize(
    "raw,uncompressed,expected",
    [
        pytest.param(50, 100, "100 uncompressed, 50 compressed, 50.00% savings", id="half"),
        pytest.param(1, 3, "3 uncompressed, 1 compressed, 66.67% savings", id="rounded"),
        pytest.param(7, 7, "7", id="same_size"),
        pytest.param(10, 0, "10", id="zero_uncompressed"),
    ],
)
def test_value_size_text(raw, uncompressed, expected):
    assert value_size_text(raw, uncompressed) == expected


# ─── Renderer object ─────────────────────────────────────────────────────────


def test_message_renderer_is_bound_to_context():
    ctx = make_context(quiet=True)
    renderer = MessageRenderer(ctx)
    assert renderer.context is ctx
    assert renderer(make_message(op=McOp.GET)).text == render_message(make_message(op=McOp.GET), ctx).text
