# patchseq/services/patch_engine.py
import hashlib
import zlib
from pathlib import Path

import bsdiff4


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def crc32_hex(data: bytes) -> str:
    return f"{zlib.crc32(data) & 0xFFFFFFFF:08X}"


def create_delta(stock: bytes, mod: bytes, out_dir: Path) -> dict:
    """bsdiff delta stock -> mod, stored next to the hash of the base it applies to."""
    out_dir.mkdir(parents=True, exist_ok=True)

    base_hash = sha256(stock)
    delta = bsdiff4.diff(stock, mod)

    (out_dir / "patch.bsdiff").write_bytes(delta)
    (out_dir / "base.sha256").write_text(base_hash)

    return {
        "base_sha256": base_hash,
        "base_size": len(stock),
        "delta_size": len(delta),
    }


def apply_delta(stock: bytes, patch_dir: Path) -> bytes:
    expected = (patch_dir / "base.sha256").read_text().strip()
    if sha256(stock) != expected:
        raise ValueError("base file does not match the stored delta")

    delta = (patch_dir / "patch.bsdiff").read_bytes()
    return bsdiff4.patch(stock, delta)
