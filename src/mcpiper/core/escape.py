"""Byte escaping for terminal display."""

_HEX = "0123456789abcdef"


def backslashify(data: bytes) -> str:
    """Escape bytes for display: printable ASCII as-is, `\\` doubled, rest as \\xNN."""
    out = []
    for byte in data:
        if byte == 0x5C:
            out.append("\\\\")
        elif 0x20 <= byte < 0x7F:
            out.append(chr(byte))
        else:
            out.append("\\x" + _HEX[byte >> 4] + _HEX[byte & 0xF])
    return "".join(out)
