"""Value payload formatting: decompression and pretty-printing.

The renderer hands raw value bytes plus message flags to a ValueFormatter and
gets back an already-styled representation and the logical (uncompressed)
size. Inputs are never mutated.
"""

from __future__ import annotations

import json
import logging
import struct
import zlib
from typing import Protocol

from mcpiper.core.escape import backslashify
from mcpiper.core.flags import McFlag
from mcpiper.core.styled_text import StyledText
from mcpiper.palette import ColorScheme

logger = logging.getLogger(__name__)

_INDENT = "  "


class ValueFormatter(Protocol):
    def format(
        self, value: bytes, flags: int, scheme: ColorScheme
    ) -> tuple[StyledText, int]:
        """Return (styled representation, uncompressed size)."""
        ...


def uncompress(value: bytes, flags: int) -> bytes | None:
    """Inflate a compressed payload; None when not compressed or not decodable.

    COMPRESSED payloads are raw zlib streams. NZLIB_COMPRESSED payloads carry a
    4-byte big-endian uncompressed size followed by the zlib stream.
    Snappy and QuickLZ have no decoder here and stay compressed.
    """
    try:
        if flags & McFlag.NZLIB_COMPRESSED:
            if len(value) < 4:
                return None
            (expected,) = struct.unpack(">I", value[:4])
            data = zlib.decompress(value[4:])
            if len(data) != expected:
                logger.debug("nzlib size mismatch: header=%d actual=%d", expected, len(data))
            return data
        if flags & McFlag.COMPRESSED:
            return zlib.decompress(value)
    except zlib.error as exc:
        logger.debug("value decompression failed flags=0x%x: %s", flags, exc)
        return None
    return None


def _format_json(obj: object, scheme: ColorScheme, out: StyledText, depth: int) -> None:
    """Append pretty-printed JSON to out, one color per token kind."""
    pad = _INDENT * (depth + 1)
    if isinstance(obj, dict):
        if not obj:
            out.append("{}", scheme.json_punctuation)
            return
        out.append("{", scheme.json_punctuation)
        for i, (k, v) in enumerate(obj.items()):
            out.append("\n" + pad, scheme.json_punctuation)
            out.append(json.dumps(k), scheme.json_key)
            out.append(": ", scheme.json_punctuation)
            _format_json(v, scheme, out, depth + 1)
            if i < len(obj) - 1:
                out.append(",", scheme.json_punctuation)
        out.append("\n" + _INDENT * depth + "}", scheme.json_punctuation)
    elif isinstance(obj, list):
        if not obj:
            out.append("[]", scheme.json_punctuation)
            return
        out.append("[", scheme.json_punctuation)
        for i, item in enumerate(obj):
            out.append("\n" + pad, scheme.json_punctuation)
            _format_json(item, scheme, out, depth + 1)
            if i < len(obj) - 1:
                out.append(",", scheme.json_punctuation)
        out.append("\n" + _INDENT * depth + "]", scheme.json_punctuation)
    elif obj is None:
        out.append("null", scheme.json_null)
    elif isinstance(obj, bool):
        out.append("true" if obj else "false", scheme.json_bool)
    elif isinstance(obj, (int, float)):
        out.append(json.dumps(obj), scheme.json_number)
    else:
        out.append(json.dumps(obj), scheme.json_string)


def _parse_json_container(data: bytes) -> object | None:
    """Parse data as a JSON object/array; None for anything else."""
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError):
        return None
    return obj if isinstance(obj, (dict, list)) else None


class McValueFormatter:
    """Default ValueFormatter: zlib inflate, then JSON or escaped text."""

    def format(
        self, value: bytes, flags: int, scheme: ColorScheme
    ) -> tuple[StyledText, int]:
        data = uncompress(value, flags)
        if data is None:
            data = value

        obj = _parse_json_container(data)
        if obj is not None:
            out = StyledText()
            try:
                _format_json(obj, scheme, out, depth=1)
                return out, len(data)
            except RecursionError:
                logger.debug("json value nested too deeply; showing escaped text")
        out = StyledText()
        out.append(backslashify(data), scheme.data_value)
        return out, len(data)
