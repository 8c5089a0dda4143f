"""Human-readable descriptions of memcache message flags."""

from __future__ import annotations

from enum import IntFlag
from typing import Protocol


class McFlag(IntFlag):
    PHP_SERIALIZED = 0x1
    COMPRESSED = 0x2
    FB_SERIALIZED = 0x4
    FB_COMPACT_SERIALIZED = 0x8
    ASCII_INT_SERIALIZED = 0x10
    NZLIB_COMPRESSED = 0x800
    QUICKLZ_COMPRESSED = 0x2000
    SNAPPY_COMPRESSED = 0x4000
    BIG_VALUE = 0x8000
    NEGATIVE_CACHE = 0x10000
    HOT_KEY = 0x20000


class FlagDecoder(Protocol):
    def describe(self, flags: int) -> list[str]:
        """Ordered descriptions; empty when nothing is known about the bits."""
        ...


def describe_flags(flags: int) -> list[str]:
    """Names of the known bits set in `flags`, lowest bit first.

    Unknown bits are not described.
    """
    return [flag.name for flag in McFlag if flags & flag.value]


class McFlagDecoder:
    """Default FlagDecoder for mcrouter message flags."""

    def describe(self, flags: int) -> list[str]:
        return describe_flags(flags)
