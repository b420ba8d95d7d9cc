# patchseq/services/hexcodec.py
from __future__ import annotations

import re

from patchseq.services.errors import HexDecodeError

_WS = re.compile(r"\s+")


def normalize_hex(s: str) -> str:
    """Drop whitespace between digits ("DE AD BE EF" -> "DEADBEEF")."""
    return _WS.sub("", s or "")


def decode(s: str) -> bytes:
    text = normalize_hex(s)
    if len(text) % 2:
        raise HexDecodeError(f"odd number of hex digits ({len(text)}) in {s!r}")
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise HexDecodeError(f"invalid hex string {s!r}: {e}") from e


def encode(data: bytes) -> str:
    return bytes(data).hex()
