import json

import pytest


def make_step(signature, patch, desc="", settings=""):
    return {"desc": desc, "settings": settings, "transition": {"signature": signature, "patch": patch}}


@pytest.fixture
def write_def(tmp_path):
    """Write a definition list as JSON and return its path."""
    def _write(entries, name="patch-seq.def"):
        p = tmp_path / name
        p.write_text(json.dumps(entries), encoding="utf-8")
        return p
    return _write


@pytest.fixture
def firmware(tmp_path):
    """20-byte file with DEADBEEF at offset 10."""
    data = bytearray(range(0x40, 0x54))
    data[10:14] = b"\xde\xad\xbe\xef"
    p = tmp_path / "fw.bin"
    p.write_bytes(bytes(data))
    return p
