from datetime import datetime, timezone

import pytest

from zcash_keys.core.zcash_types import DecodeError, Network
from zcash_keys.crypto.bech32 import Bech32m
from zcash_keys.crypto.f4jumble import f4jumble, f4jumble_inv
from zcash_keys.crypto.unified_encoding import (
    UnifiedEncoding, UnifiedEncodingMetadata, human_readable_part, container_for_hrp,
    read_compact_size, write_compact_size
)
from zcash_keys.keys.elements import UnifiedContainerKind, UnifiedTypeCode, UnknownElement
from zcash_keys.keys.receivers import OrchardReceiver, SaplingReceiver, TransparentP2PKHReceiver

UA_ORCHARD_SAPLING_TRANSPARENT = (
    "u1vv2ws6xhs72faugmlrasyeq298l05rrj6wfw8hr3r29y3czev5qt4ugp7kylz6suu04363ze92dfg8ftxf3237js0x9p5r82fgy"
    "47xkjnw75tqaevhfh0rnua72hurt22v3w3f7h8yt6mxaa0wpeeh9jcm359ww3rl6fj5ylqqv54uuwrs8q4gys9r3cxdm3yslsh3rt6p7wz"
    "nzhky7"
)
UA_ORCHARD_SAPLING = (
    "u10p78pgwpatn9n5zsut79577c78yt59cerl0ymdk7m4ug3hd7cw0fj2c7k20q3ndt2x49zzy69xgl22wr7tgl652lxflaex79xgpg2k"
    "yk9m83nzerccpvkxfy47v7xz6g5fqaz3x4tvl6lnkh58j6mj60synt2kr5rgxcpdm3qq9u0nm2"
)
UA_ORCHARD = "u1v0j6szgvcquae449dltsrhdhlle4ac8cxd3z8k4j2wtxgfxg6xnq25a900d3yq65mz0l6heqhcj468f7q3l2wnxdsxjrcw90svum7q67"
UA_SAPLING = "u12s5xnr2r6jj4xt72qjx35mru9mq3w3v0mxkvtd67e9fsr4tzf682983qn752kf5fvcdva79pr2udwhg5sm4pw6np90t8q6q8tcu97k6c"

def _raw_container(hrp, items):
    """Jumble hand-written items so that decode-side checks can be exercised"""
    payload = bytearray()
    for type_code, data in items:
        payload.append(type_code)
        payload.extend(write_compact_size(len(data)))
        payload.extend(data)
    payload.extend(hrp.encode().ljust(16, b"\x00"))
    return Bech32m.encode(hrp, f4jumble(bytes(payload)))

@pytest.mark.parametrize("length", [48, 64, 100, 128, 129, 300, 5000])
def test_f4jumble_is_invertible(length):
    message = bytes(i % 251 for i in range(length))
    jumbled = f4jumble(message)
    assert len(jumbled) == length
    assert jumbled != message
    assert f4jumble_inv(jumbled) == message

def test_f4jumble_spreads_a_single_bit_change():
    message = bytes(100)
    changed = bytes([1]) + bytes(99)
    a, b = f4jumble(message), f4jumble(changed)
    assert a[:50] != b[:50]
    assert a[50:] != b[50:]

def test_f4jumble_rejects_short_input():
    with pytest.raises(ValueError):
        f4jumble(bytes(47))

@pytest.mark.parametrize("value", [0, 0xfc, 0xfd, 0xffff, 0x10000, 0xffffffff, 0x100000000])
def test_compact_size(value):
    encoded = write_compact_size(value)
    assert read_compact_size(encoded, 0) == (value, len(encoded))

def test_compact_size_rejects_non_canonical_and_truncated():
    assert read_compact_size(b"\xfd\x10\x00", 0) is None
    assert read_compact_size(b"\xfe\x01", 0) is None
    assert read_compact_size(b"", 0) is None

def test_human_readable_parts():
    assert human_readable_part(UnifiedContainerKind.ADDRESS, Network.TESTNET) == "utest"
    assert human_readable_part(UnifiedContainerKind.FULL_VIEWING_KEY, Network.MAINNET) == "uview"
    assert container_for_hrp("uivktest") == (UnifiedContainerKind.INCOMING_VIEWING_KEY, Network.TESTNET)
    assert container_for_hrp("zs") is None

@pytest.mark.parametrize("encoded,type_codes", [
    (UA_ORCHARD_SAPLING_TRANSPARENT, [UnifiedTypeCode.P2PKH, UnifiedTypeCode.SAPLING, UnifiedTypeCode.ORCHARD]),
    (UA_ORCHARD_SAPLING, [UnifiedTypeCode.SAPLING, UnifiedTypeCode.ORCHARD]),
    (UA_ORCHARD, [UnifiedTypeCode.ORCHARD]),
    (UA_SAPLING, [UnifiedTypeCode.SAPLING]),
])
def test_real_unified_addresses_decode_and_re_encode(encoded, type_codes):
    result = UnifiedEncoding.try_decode(encoded)
    assert result.success, result.message
    contents = result.value
    assert contents.kind == UnifiedContainerKind.ADDRESS
    assert contents.network == Network.MAINNET
    assert [e.unified_type_code for e in contents.elements] == type_codes
    assert contents.metadata.is_empty
    assert UnifiedEncoding.encode("u", contents.elements) == encoded

def test_encode_is_independent_of_input_order():
    receivers = [OrchardReceiver(bytes([3]) * 43), TransparentP2PKHReceiver(bytes([1]) * 20),
                 SaplingReceiver(bytes([2]) * 43)]
    assert UnifiedEncoding.encode("u", receivers) == UnifiedEncoding.encode("u", list(reversed(receivers)))

def test_encode_rejects_duplicate_type_codes():
    with pytest.raises(ValueError):
        UnifiedEncoding.encode("u", [SaplingReceiver(bytes(43)), SaplingReceiver(bytes([1]) * 43)])

def test_encode_requires_an_element():
    with pytest.raises(ValueError):
        UnifiedEncoding.encode("u", [])

def test_decode_rejects_duplicate_type_codes():
    encoded = _raw_container("u", [(0x02, bytes(43)), (0x02, bytes([1]) * 43)])
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.TYPE_MISMATCH

def test_decode_rejects_descending_type_codes():
    encoded = _raw_container("u", [(0x03, bytes(43)), (0x02, bytes(43))])
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.TYPE_MISMATCH

def test_decode_rejects_truncated_item():
    payload = bytes([0x02, 43]) + bytes(30) + b"u".ljust(16, b"\x00")
    encoded = Bech32m.encode("u", f4jumble(payload))
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.UNEXPECTED_LENGTH

def test_decode_rejects_wrong_item_length():
    encoded = _raw_container("u", [(0x02, bytes(42))])
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.UNEXPECTED_LENGTH

def test_decode_rejects_padding_for_another_hrp():
    payload = bytes([0x02, 43]) + bytes(43) + b"utest".ljust(16, b"\x00")
    encoded = Bech32m.encode("u", f4jumble(payload))
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.BAD_PADDING

def test_decode_rejects_unknown_hrp():
    encoded = _raw_container("zz", [(0x02, bytes(43))])
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.UNRECOGNIZED_HRP

def test_decode_rejects_short_payload():
    assert UnifiedEncoding.try_decode(Bech32m.encode("u", bytes(20))).error == DecodeError.UNEXPECTED_LENGTH

def test_decode_rejects_plain_bech32():
    from zcash_keys.crypto.bech32 import Bech32
    encoded = Bech32.encode("u", bytes(64))
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.INVALID_CHECKSUM

def test_decode_checks_expected_kind():
    result = UnifiedEncoding.try_decode(UA_SAPLING, UnifiedContainerKind.FULL_VIEWING_KEY)
    assert result.error == DecodeError.TYPE_MISMATCH

def test_single_character_flips_are_detected():
    for position in (3, 20, len(UA_ORCHARD) // 2, len(UA_ORCHARD) - 1):
        original = UA_ORCHARD[position]
        flipped = UA_ORCHARD[:position] + ('q' if original != 'q' else 'p') + UA_ORCHARD[position + 1:]
        assert UnifiedEncoding.try_decode(flipped).error == DecodeError.INVALID_CHECKSUM

def test_unknown_address_items_are_preserved():
    unknown = UnknownElement(0x05, b"future receiver")
    encoded = UnifiedEncoding.encode("u", [SaplingReceiver(bytes(43)), unknown])
    contents = UnifiedEncoding.try_decode(encoded).value
    assert contents.elements[-1] == unknown
    assert UnifiedEncoding.encode("u", contents.elements) == encoded

def test_unknown_viewing_key_items_are_rejected():
    encoded = _raw_container("uview", [(0x05, bytes(40))])
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.TYPE_MISMATCH

def test_metadata_round_trip():
    date = datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    metadata = UnifiedEncodingMetadata(expiration_height=2500000, expiration_date=date)
    encoded = UnifiedEncoding.encode("u", [OrchardReceiver(bytes(43))], metadata)
    contents = UnifiedEncoding.try_decode(encoded).value
    assert contents.metadata.expiration_height == 2500000
    assert contents.metadata.expiration_date == date
    assert len(contents.elements) == 1

def test_metadata_with_bad_length_is_rejected():
    encoded = _raw_container("u", [(0x02, bytes(43)), (0xE0, bytes(3))])
    assert UnifiedEncoding.try_decode(encoded).error == DecodeError.UNEXPECTED_LENGTH

def test_unrecognised_high_type_codes_are_kept_in_addresses():
    encoded = _raw_container("u", [(0x02, bytes(43)), (0xE2, bytes(5))])
    result = UnifiedEncoding.try_decode(encoded)
    assert result.success
    assert [e.unified_type_code for e in result.value.elements] == [0x02, 0xE2]
    assert result.value.metadata.is_empty

def test_metadata_validation():
    with pytest.raises(ValueError):
        UnifiedEncodingMetadata(expiration_height=-1)
    assert UnifiedEncodingMetadata().is_empty
