import pytest

from zcash_keys.core.exceptions import FormatError
from zcash_keys.core.zcash_types import DecodeError
from zcash_keys.crypto.base58check import Base58Check

P2PKH = "t1a7w3qM23i4ajQcbX5wd6oH4zTY8Bry5vF"
SPROUT = "zc8E5gYid86n4bo2Usdq1cpr7PpfoJGzttwBHEEgGhGkLUg7SPPVFNB2AkRFXZ7usfphup5426dt1buMmY3fkYeRrQGLa8y"

def test_transparent_address_payload():
    payload = Base58Check.decode(P2PKH)
    assert len(payload) == 22
    assert payload[:2] == bytes.fromhex("1CB8")

def test_sprout_address_payload():
    payload = Base58Check.decode(SPROUT)
    assert len(payload) == 66
    assert payload[:2] == bytes.fromhex("169A")

@pytest.mark.parametrize("encoded", [P2PKH, SPROUT])
def test_round_trip(encoded):
    assert Base58Check.encode(Base58Check.decode(encoded)) == encoded

def test_invalid_character():
    result = Base58Check.try_decode(P2PKH[:5] + "0" + P2PKH[6:])
    assert result.error == DecodeError.INVALID_CHARACTER

def test_checksum_mismatch():
    flipped = P2PKH[:10] + ("b" if P2PKH[10] != "b" else "c") + P2PKH[11:]
    assert Base58Check.try_decode(flipped).error == DecodeError.INVALID_CHECKSUM

def test_too_short():
    assert Base58Check.try_decode("1").error == DecodeError.INVALID_CHECKSUM

def test_buffer_too_small():
    assert Base58Check.try_decode(P2PKH, max_data_length=20).error == DecodeError.BUFFER_TOO_SMALL
    with pytest.raises(ValueError):
        Base58Check.decode(P2PKH, max_data_length=20)

def test_decode_raises_format_error():
    with pytest.raises(FormatError) as info:
        Base58Check.decode(P2PKH[:-1] + ("1" if P2PKH[-1] != "1" else "2"))
    assert info.value.code == DecodeError.INVALID_CHECKSUM

def test_checksum_is_double_sha256_prefix():
    payload = b"\x1c\xb8" + bytes(20)
    encoded = Base58Check.encode(payload)
    assert Base58Check.decode(encoded) == payload
    assert len(Base58Check.checksum(payload)) == 4
