import pytest

from patchseq.services.patch_engine import apply_delta, crc32_hex, create_delta


def test_crc32_hex():
    assert crc32_hex(b"123456789") == "CBF43926"


def test_delta_round_trip(tmp_path):
    stock = bytes(range(256)) * 4
    mod = bytearray(stock)
    mod[100:104] = b"\xca\xfe\xba\xbe"

    meta = create_delta(stock, bytes(mod), tmp_path / "d")
    assert meta["base_size"] == len(stock)
    assert apply_delta(stock, tmp_path / "d") == bytes(mod)


def test_delta_rejects_other_base(tmp_path):
    create_delta(b"\x00" * 32, b"\x01" * 32, tmp_path)
    with pytest.raises(ValueError):
        apply_delta(b"\x02" * 32, tmp_path)
