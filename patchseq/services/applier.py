# patchseq/services/applier.py
from __future__ import annotations


def apply(buf: bytearray, offset: int, patch: bytes) -> None:
    """Overwrite buf[offset:offset+len(patch)] in place. Never resizes `buf`."""
    end = offset + len(patch)
    if offset < 0 or end > len(buf):
        raise ValueError(f"patch of {len(patch)} bytes at offset {offset} overruns buffer of {len(buf)} bytes")
    buf[offset:end] = patch
