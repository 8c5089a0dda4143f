"""Search pattern compilation.

Patterns are POSIX basic regular expressions (BRE) by default, the dialect
grep uses without -E. They are translated once into Python `re` syntax:

    BRE            Python
    \\( \\)          ( )         grouping
    \\{m,n\\}        {m,n}       interval
    \\|             |           alternation (GNU extension)
    \\+ \\?          + ?         repetition (GNU extension)
    \\< \\>          \\b          word boundary (GNU extension)
    + ? | ( ) { }  literal

`*` is literal at the start of an expression; `^` and `$` are anchors only
at the start/end of an expression or group. With syntax="extended" the
pattern is handed to `re` unchanged.

Compilation is fallible: malformed syntax raises InvalidPatternError. Only
the CLI entry point turns that into a diagnostic and a nonzero exit.
"""

from __future__ import annotations

import re
from enum import Enum


class PatternSyntax(Enum):
    BASIC = "basic"
    EXTENDED = "extended"


class InvalidPatternError(ValueError):
    """Raised when a search pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f"{pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


# POSIX character classes → Python class fragments
_POSIX_CLASSES = {
    "alpha": "a-zA-Z",
    "digit": "0-9",
    "alnum": "a-zA-Z0-9",
    "upper": "A-Z",
    "lower": "a-z",
    "space": " \\t\\n\\r\\f\\v",
    "blank": " \\t",
    "punct": re.escape("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"),
    "xdigit": "0-9A-Fa-f",
    "cntrl": "\\x00-\\x1f\\x7f",
    "print": "\\x20-\\x7e",
    "graph": "\\x21-\\x7e",
}

# Escapes that keep their meaning in Python
_PASSTHROUGH_ESCAPES = set("wWsSbB")

_SIMPLE_ESCAPES = {
    "<": r"\b",
    ">": r"\b",
    "`": r"\A",
    "'": r"\Z",
}

_INTERVAL_RE = re.compile(r"(\d+)(,(\d*))?$")


def _translate_bracket(pattern: str, i: int) -> tuple[str, int]:
    """Translate a bracket expression starting after '['.

    Returns (python_fragment, index just past the closing ']').
    """
    out = ["["]
    n = len(pattern)
    if i < n and pattern[i] == "^":
        out.append("^")
        i += 1
    first = True
    while True:
        if i >= n:
            raise InvalidPatternError(pattern, "unmatched [ or [^")
        ch = pattern[i]
        if ch == "]" and not first:
            out.append("]")
            return "".join(out), i + 1
        first = False
        if ch == "[" and i + 1 < n and pattern[i + 1] in ":=.":
            kind = pattern[i + 1]
            close = pattern.find(kind + "]", i + 2)
            if close < 0:
                raise InvalidPatternError(pattern, "unterminated character class")
            name = pattern[i + 2:close]
            if kind == ":":
                if name not in _POSIX_CLASSES:
                    raise InvalidPatternError(pattern, f"invalid character class {name!r}")
                out.append(_POSIX_CLASSES[name])
            else:
                # Equivalence classes and collating symbols: single characters only
                if len(name) != 1:
                    raise InvalidPatternError(pattern, f"invalid collation element {name!r}")
                out.append(re.escape(name))
            i = close + 2
            continue
        if ch in "\\[]^&~|":
            out.append("\\" + ch)
        else:
            out.append(ch)
        i += 1


def translate_bre(pattern: str) -> str:
    """Translate a POSIX basic regular expression into Python `re` syntax."""
    out: list[str] = []
    n = len(pattern)
    i = 0
    open_groups: list[int] = []
    group_count = 0
    # True where a following '*' is literal and '^' is an anchor
    at_start = True
    # True when the last emitted token can take a repetition operator
    can_repeat = False
    last_was_quantifier = False

    def emit(token: str, repeatable: bool) -> None:
        nonlocal at_start, can_repeat, last_was_quantifier
        out.append(token)
        at_start = False
        can_repeat = repeatable
        last_was_quantifier = False

    def emit_quantifier(token: str) -> None:
        nonlocal can_repeat, last_was_quantifier
        if last_was_quantifier:
            # BRE allows stacked repetition (a** == a*); Python does not
            return
        out.append(token)
        can_repeat = False
        last_was_quantifier = True

    def at_expression_end(j: int) -> bool:
        return j >= n or pattern.startswith("\\)", j) or pattern.startswith("\\|", j)

    while i < n:
        ch = pattern[i]

        if ch == "\\":
            if i + 1 >= n:
                raise InvalidPatternError(pattern, "trailing backslash")
            nxt = pattern[i + 1]
            i += 2
            if nxt == "(":
                group_count += 1
                open_groups.append(group_count)
                out.append("(")
                at_start = True
                can_repeat = False
                last_was_quantifier = False
            elif nxt == ")":
                if not open_groups:
                    raise InvalidPatternError(pattern, "unmatched \\)")
                open_groups.pop()
                emit(")", True)
            elif nxt == "|":
                out.append("|")
                at_start = True
                can_repeat = False
                last_was_quantifier = False
            elif nxt == "{":
                close = pattern.find("\\}", i)
                if close < 0:
                    raise InvalidPatternError(pattern, "unmatched \\{")
                body = pattern[i:close]
                m = _INTERVAL_RE.match(body)
                if m is None:
                    raise InvalidPatternError(pattern, "invalid content of \\{\\}")
                low = int(m.group(1))
                high = m.group(3)
                if high and int(high) < low:
                    raise InvalidPatternError(pattern, "invalid range end in \\{\\}")
                if not can_repeat and not last_was_quantifier:
                    raise InvalidPatternError(pattern, "invalid preceding regular expression")
                if last_was_quantifier:
                    raise InvalidPatternError(pattern, "multiple repetition operators")
                emit_quantifier("{" + body + "}")
                i = close + 2
            elif nxt in "+?":
                if can_repeat or last_was_quantifier:
                    emit_quantifier(nxt)
                else:
                    emit(re.escape(nxt), True)
            elif nxt.isdigit() and nxt != "0":
                ref = int(nxt)
                if ref > group_count or ref in open_groups:
                    raise InvalidPatternError(pattern, "invalid back reference")
                emit("\\" + nxt, True)
            elif nxt in _SIMPLE_ESCAPES:
                emit(_SIMPLE_ESCAPES[nxt], False)
            elif nxt in _PASSTHROUGH_ESCAPES:
                emit("\\" + nxt, nxt not in "bB")
            else:
                emit(re.escape(nxt), True)
            continue

        if ch == "[":
            fragment, i = _translate_bracket(pattern, i + 1)
            emit(fragment, True)
            continue

        if ch == "*":
            if at_start or not (can_repeat or last_was_quantifier):
                emit(r"\*", True)
            else:
                emit_quantifier("*")
            i += 1
            continue

        if ch == "^":
            if at_start:
                out.append("^")
                # '*' right after a leading anchor is still literal
                can_repeat = False
            else:
                emit(r"\^", True)
            i += 1
            continue

        if ch == "$":
            if at_expression_end(i + 1):
                emit("$", False)
            else:
                emit(r"\$", True)
            i += 1
            continue

        if ch == ".":
            emit(".", True)
        else:
            emit(re.escape(ch), True)
        i += 1

    if open_groups:
        raise InvalidPatternError(pattern, "unmatched \\(")
    return "".join(out)


def compile_pattern(
    source: str | None, syntax: PatternSyntax = PatternSyntax.BASIC
) -> re.Pattern | None:
    """Compile a search pattern once, at startup.

    Returns None for an empty pattern (match everything, highlight nothing).
    Raises InvalidPatternError on malformed syntax.
    """
    if not source:
        return None
    translated = translate_bre(source) if syntax is PatternSyntax.BASIC else source
    try:
        return re.compile(translated)
    except re.error as exc:
        raise InvalidPatternError(source, str(exc)) from exc
