"""Decoded memcache message events.

// [LAW:one-source-of-truth] McMessage is THE event shape the renderer consumes.

Channels deliver one JSON object per line; McMessage.from_dict is the sole
validation boundary between that wire shape and the typed event.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from enum import Enum


class MessageDecodeError(ValueError):
    """A channel record could not be turned into an McMessage."""


class McOp(Enum):
    """Memcache operation. Values are the display names."""

    UNKNOWN = "unknown"
    ECHO = "echo"
    QUIT = "quit"
    VERSION = "version"
    SERVERERR = "servererr"
    GET = "get"
    SET = "set"
    ADD = "add"
    REPLACE = "replace"
    APPEND = "append"
    PREPEND = "prepend"
    CAS = "cas"
    DELETE = "delete"
    INCR = "incr"
    DECR = "decr"
    FLUSHALL = "flush_all"
    FLUSHRE = "flush_regex"
    STATS = "stats"
    VERBOSITY = "verbosity"
    LEASE_GET = "lease-get"
    LEASE_SET = "lease-set"
    SHUTDOWN = "shutdown"
    # Channel lifecycle marker, not data
    END = "end"
    METAGET = "metaget"
    EXEC = "exec"
    GETS = "gets"
    GET_SERVICE_INFO = "get-service-info"
    TOUCH = "touch"

    @classmethod
    def parse(cls, raw: object) -> McOp:
        """Parse an op from its display name, enum name or mc_op_* identifier."""
        if raw is None or raw == "":
            return cls.UNKNOWN
        if not isinstance(raw, str):
            raise MessageDecodeError(f"op must be a string, got {type(raw).__name__}")
        name = raw.strip()
        if name.startswith("mc_op_"):
            name = name[len("mc_op_"):]
        for op in cls:
            if name == op.value or name.upper().replace("-", "_") == op.name:
                return op
        raise MessageDecodeError(f"unknown op {raw!r}")


class McResult(Enum):
    """Reply result. Values are the mc_res_* identifiers used for display."""

    UNKNOWN = "mc_res_unknown"
    DELETED = "mc_res_deleted"
    TOUCHED = "mc_res_touched"
    FOUND = "mc_res_found"
    FOUNDSTALE = "mc_res_foundstale"
    NOTFOUND = "mc_res_notfound"
    NOTFOUNDHOT = "mc_res_notfoundhot"
    NOTSTORED = "mc_res_notstored"
    STALESTORED = "mc_res_stalestored"
    OK = "mc_res_ok"
    STORED = "mc_res_stored"
    EXISTS = "mc_res_exists"
    OOO = "mc_res_ooo"
    TIMEOUT = "mc_res_timeout"
    CONNECT_TIMEOUT = "mc_res_connect_timeout"
    CONNECT_ERROR = "mc_res_connect_error"
    BUSY = "mc_res_busy"
    TRY_AGAIN = "mc_res_try_again"
    SHUTDOWN = "mc_res_shutdown"
    TKO = "mc_res_tko"
    BAD_COMMAND = "mc_res_bad_command"
    BAD_KEY = "mc_res_bad_key"
    BAD_FLAGS = "mc_res_bad_flags"
    BAD_EXPTIME = "mc_res_bad_exptime"
    BAD_LEASE_ID = "mc_res_bad_lease_id"
    BAD_CAS_ID = "mc_res_bad_cas_id"
    BAD_VALUE = "mc_res_bad_value"
    ABORTED = "mc_res_aborted"
    CLIENT_ERROR = "mc_res_client_error"
    LOCAL_ERROR = "mc_res_local_error"
    REMOTE_ERROR = "mc_res_remote_error"
    WAITING = "mc_res_waiting"

    @classmethod
    def parse(cls, raw: object) -> McResult:
        """Parse a result from its mc_res_* identifier or short name."""
        if raw is None or raw == "":
            return cls.UNKNOWN
        if not isinstance(raw, str):
            raise MessageDecodeError(f"result must be a string, got {type(raw).__name__}")
        name = raw.strip().lower()
        if not name.startswith("mc_res_"):
            name = "mc_res_" + name
        try:
            return cls(name)
        except ValueError:
            raise MessageDecodeError(f"unknown result {raw!r}") from None


@dataclass(frozen=True)
class McMessage:
    """One decoded protocol event.

    key/value are None when absent. exptime 0 means "no expiration".
    """

    op: McOp = McOp.UNKNOWN
    result: McResult = McResult.UNKNOWN
    key: bytes | None = None
    reqid: int = 0
    flags: int = 0
    exptime: int = 0
    value: bytes | None = None

    @property
    def is_end(self) -> bool:
        return self.op is McOp.END

    @classmethod
    def from_dict(cls, data: object) -> McMessage:
        """Build a message from a decoded JSON record.

        Text fields ("key", "value") are utf-8 encoded; binary payloads use
        "key_b64"/"value_b64".
        """
        if not isinstance(data, dict):
            raise MessageDecodeError(f"record must be an object, got {type(data).__name__}")
        return cls(
            op=McOp.parse(data.get("op")),
            result=McResult.parse(data.get("result")),
            key=_bytes_field(data, "key"),
            reqid=_uint_field(data, "reqid"),
            flags=_uint_field(data, "flags"),
            exptime=_uint_field(data, "exptime"),
            value=_bytes_field(data, "value"),
        )


def _uint_field(data: dict, name: str) -> int:
    raw = data.get(name, 0)
    if raw is None:
        return 0
    # bool is an int subclass; reject it explicitly
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise MessageDecodeError(f"{name} must be an integer, got {raw!r}")
    if raw < 0:
        raise MessageDecodeError(f"{name} must be non-negative, got {raw}")
    return raw


def _bytes_field(data: dict, name: str) -> bytes | None:
    b64 = data.get(name + "_b64")
    if b64 is not None:
        if not isinstance(b64, str):
            raise MessageDecodeError(f"{name}_b64 must be a string")
        try:
            return base64.b64decode(b64, validate=True)
        except binascii.Error as exc:
            raise MessageDecodeError(f"{name}_b64 is not valid base64: {exc}") from exc
    raw = data.get(name)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise MessageDecodeError(f"{name} must be a string, got {type(raw).__name__}")
    return raw.encode("utf-8", errors="surrogateescape")
