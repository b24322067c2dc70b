import pytest

from zcash_keys.core.exceptions import InvalidKeyError
from zcash_keys.core.zcash_types import Network
from zcash_keys.crypto.bech32 import Bech32
from zcash_keys.keys.diversifier import DiversifierIndex
from zcash_keys.keys.receivers import SaplingReceiver
from zcash_keys.keys.sapling import (
    JUBJUB_IDENTITY, DiversifiableFullViewingKey, ExpandedSpendingKey, FullViewingKey, IncomingViewingKey,
    is_jubjub_point
)

from tests.test_zip32 import SAPLING_XFVK_MAIN

@pytest.fixture
def dfvk(backend):
    expsk = ExpandedSpendingKey.from_spending_key(bytes(range(32)))
    return DiversifiableFullViewingKey(expsk.full_viewing_key, bytes(range(32, 64)))

def test_expanded_spending_key_round_trip():
    expsk = ExpandedSpendingKey.from_spending_key(bytes(range(32)), Network.TESTNET)
    assert ExpandedSpendingKey.from_bytes(expsk.to_bytes(), Network.TESTNET) == expsk
    assert expsk.ovk.hex() not in repr(expsk)

def test_expanded_spending_key_rejects_non_canonical_scalars():
    with pytest.raises(ValueError):
        ExpandedSpendingKey(b'\xff' * 32, bytes(32), bytes(32))
    with pytest.raises(ValueError):
        ExpandedSpendingKey.from_bytes(bytes(95))

def test_full_viewing_key_from_backend(dfvk, backend):
    assert 'sapling_ak_nk' in backend.calls
    assert len(dfvk.full_viewing_key.to_bytes()) == 96
    assert FullViewingKey.from_bytes(dfvk.full_viewing_key.to_bytes()) == dfvk.full_viewing_key

def test_diversifiable_key_bytes_round_trip(dfvk):
    data = dfvk.to_bytes()
    assert len(data) == 128
    assert DiversifiableFullViewingKey.from_bytes(data) == dfvk
    with pytest.raises(ValueError):
        DiversifiableFullViewingKey.from_bytes(data[:-1])

def test_invalid_diversifier_indexes_are_skipped(dfvk):
    assert dfvk.try_create_receiver(1) is None
    with pytest.raises(InvalidKeyError):
        dfvk.create_receiver(1)
    index, receiver = dfvk.find_receiver(1)
    assert index == DiversifierIndex(2)
    assert receiver == dfvk.create_receiver(2)

def test_default_receiver_uses_first_valid_index(dfvk):
    assert dfvk.create_default_receiver() == dfvk.create_receiver(0)

def test_receiver_index_is_recovered(dfvk):
    receiver = dfvk.create_receiver(5)
    assert dfvk.try_get_diversifier_index(receiver) == DiversifierIndex(5)
    assert dfvk.check_receiver(receiver)
    assert not dfvk.check_receiver(SaplingReceiver(bytes(43)))

def test_other_keys_do_not_claim_our_receivers(dfvk, backend):
    other_expsk = ExpandedSpendingKey.from_spending_key(bytes(range(1, 33)))
    other = DiversifiableFullViewingKey(other_expsk.full_viewing_key, bytes(32))
    assert not other.check_receiver(dfvk.create_receiver(0))

def test_incoming_viewing_key_bytes(dfvk):
    ivk = dfvk.incoming_viewing_key
    assert IncomingViewingKey.from_bytes(ivk.to_bytes()) == ivk
    data = bytearray(ivk.to_bytes())
    data[63] |= 0x08
    with pytest.raises(ValueError):
        IncomingViewingKey.from_bytes(bytes(data))

def test_incoming_viewing_key_matches_full_viewing_key(dfvk):
    ivk = IncomingViewingKey.from_bytes(dfvk.incoming_viewing_key.to_bytes())
    assert ivk.create_receiver(3) == dfvk.create_receiver(3)

def test_unified_element_lengths(dfvk):
    buffer = bytearray()
    assert dfvk.write_unified_data(buffer) == 128
    assert DiversifiableFullViewingKey.read_unified_data(bytes(buffer), Network.MAINNET) == dfvk
    buffer = bytearray()
    assert dfvk.incoming_viewing_key.write_unified_data(buffer) == 64

def test_jubjub_point_encodings():
    assert is_jubjub_point(JUBJUB_IDENTITY)
    ak_nk = Bech32.decode(SAPLING_XFVK_MAIN)[1][41:105]
    assert is_jubjub_point(ak_nk[:32])
    assert is_jubjub_point(ak_nk[32:])
    assert not is_jubjub_point(b'\xff' * 31 + b'\x7f')
    # u = 0 only has the even encoding
    assert not is_jubjub_point(b'\x01' + bytes(30) + b'\x80')

def test_full_viewing_key_rejects_invalid_points(dfvk):
    data = dfvk.full_viewing_key.to_bytes()
    with pytest.raises(ValueError):
        FullViewingKey.from_bytes(JUBJUB_IDENTITY + data[32:])
    with pytest.raises(ValueError):
        FullViewingKey.from_bytes(data[:32] + b'\xff' * 32 + data[64:])
    with pytest.raises(ValueError):
        DiversifiableFullViewingKey.from_bytes(b'\xff' * 32 + dfvk.to_bytes()[32:])

def test_internal_key_keeps_ak(dfvk):
    internal = dfvk.derive_internal()
    assert internal.full_viewing_key.ak == dfvk.full_viewing_key.ak
    assert internal.full_viewing_key.nk != dfvk.full_viewing_key.nk
    assert internal.dk != dfvk.dk
    assert internal.ovk != dfvk.ovk
    assert internal.create_receiver(0) != dfvk.create_receiver(0)
    assert not dfvk.check_receiver(internal.create_receiver(0))

def test_internal_key_needs_backend_support(backend):
    foreign = DiversifiableFullViewingKey.from_bytes(Bech32.decode(SAPLING_XFVK_MAIN)[1][41:])
    with pytest.raises(InvalidKeyError):
        foreign.derive_internal()
