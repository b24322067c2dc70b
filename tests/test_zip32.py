import hashlib
import struct

import pytest

from zcash_keys.core.exceptions import BackendUnavailableError, FormatError, UnsupportedDerivationError
from zcash_keys.core.zcash_types import DecodeError, Network
from zcash_keys.crypto.bech32 import Bech32
from zcash_keys.zip32 import orchard as zip32_orchard
from zcash_keys.zip32 import sapling as zip32_sapling
from zcash_keys.zip32.common import (
    DerivationInfo, HARDENED_BIT, MAX_DEPTH, account_path, format_path, harden, is_hardened, parse_path
)

SAPLING_XFVK_MAIN = (
    "zxviews1qveachkgqqqqpq99ju5nxh8zx5k5kkaeante0l3zcv0737su6jyadm4kk337qeu7h67grk26k7lyqvngnx53qt2gjqwatxctq3swj86"
    "n54sa34cg7f0gcff9ue6t7wqweh2q0he8lm9x2ela3kypl00f2wk6eypuzhl5pv3rkuwwm9dzxngcurfzgnqtpx4mvj7z8dpewx7edey0yaaat"
    "jnhjdnan4vqxvmny003n4l2ye9ey5nt5y3sqfy3r6l0ungptk2u2qgaxscq6f9ek"
)
SAPLING_XFVK_TEST = (
    "zxviewtestsapling1qwgr6ehwqqqqpq8wxv4wuwhqzlfgam673vzk8eyq0s85t7ny3yszkrnqmmjg8yhk3tg909ph892t9exkp37sj66xd5u3"
    "juxfnd2xk6npdugecuesmn8svv5gd7u4gawlah8tdhzep0yvmk3hfy250ck7ezqyyzxff0xe7lpjaw2t56wcan7m3el97m22jj3u7s3qxdnw5q"
    "km3tgm5878yn3zth7wrh99ecslcxm4n4vqm2jjusns4gu2c6kh3qwly625lvmyyaw5lagag7dry"
)

def test_harden():
    assert harden(5) == 5 | HARDENED_BIT
    assert is_hardened(harden(0))
    assert not is_hardened(0)
    with pytest.raises(ValueError):
        harden(HARDENED_BIT)

def test_parse_and_format_path():
    indexes = parse_path("m/32'/133h/0'/7")
    assert indexes == [harden(32), harden(133), harden(0), 7]
    assert format_path(indexes) == "m/32'/133'/0'/7"
    assert parse_path("m") == []
    assert parse_path([1, harden(2)]) == [1, harden(2)]

@pytest.mark.parametrize("path", ["32'/0'", "m/x", "m/2147483648", "m//1", ""])
def test_parse_path_rejects_bad_paths(path):
    with pytest.raises(ValueError):
        parse_path(path)

def test_account_path():
    assert account_path(32, Network.MAINNET, 3) == [harden(32), harden(133), harden(3)]
    assert account_path(44, Network.TESTNET, 0) == [harden(44), harden(1), harden(0)]

def test_derivation_depth_is_bounded():
    info = DerivationInfo(bytes(32), depth=MAX_DEPTH)
    with pytest.raises(ValueError):
        info.child(bytes(32), bytes(32), 0)

def test_derivation_info_validation():
    with pytest.raises(ValueError):
        DerivationInfo(bytes(31))
    with pytest.raises(ValueError):
        DerivationInfo(bytes(32), parent_fingerprint_tag=bytes(3))
    assert DerivationInfo(bytes(32)).is_master

@pytest.mark.parametrize("module", [zip32_orchard, zip32_sapling])
def test_master_key_seed_length(module):
    with pytest.raises(ValueError):
        module.ExtendedSpendingKey.create(bytes(31))
    with pytest.raises(ValueError):
        module.ExtendedSpendingKey.create(bytes(253))

@pytest.mark.parametrize("module", [zip32_orchard, zip32_sapling])
def test_master_key_is_deterministic(module, seed):
    a = module.ExtendedSpendingKey.create(seed)
    b = module.ExtendedSpendingKey.create(seed)
    assert a == b
    assert a.depth == 0
    assert a != module.ExtendedSpendingKey.create(seed[::-1])

@pytest.mark.parametrize("module", [zip32_orchard, zip32_sapling])
def test_shielded_keys_only_derive_hardened_children(module, seed, backend):
    master = module.ExtendedSpendingKey.create(seed)
    with pytest.raises(UnsupportedDerivationError):
        master.derive(1)
    child = master.derive(harden(1))
    assert child.depth == 1
    assert child.child_index == harden(1)
    assert child.parent_full_viewing_key_tag == master.fingerprint[:4]
    assert child != master.derive(harden(2))

@pytest.mark.parametrize("module", [zip32_orchard, zip32_sapling])
def test_account_key_matches_explicit_path(module, seed, backend):
    account = module.ExtendedSpendingKey.create_account(seed, 1)
    explicit = module.ExtendedSpendingKey.create(seed).derive_path("m/32'/133'/1'")
    assert account == explicit
    assert account.depth == 3

@pytest.mark.parametrize("module", [zip32_orchard, zip32_sapling])
def test_child_derivation_needs_a_backend(module, seed, no_backend):
    master = module.ExtendedSpendingKey.create(seed)
    with pytest.raises(BackendUnavailableError):
        master.derive(harden(0))

def test_orchard_spending_key_derivation_is_backend_free(seed, no_backend):
    key = zip32_orchard.ExtendedSpendingKey.create(seed)
    assert len(key.spending_key.sk) == 32
    assert len(key.chain_code) == 32

@pytest.mark.parametrize("encoded,network", [
    (SAPLING_XFVK_MAIN, Network.MAINNET),
    (SAPLING_XFVK_TEST, Network.TESTNET),
])
def test_sapling_extended_full_viewing_key_round_trip(encoded, network):
    key = zip32_sapling.ExtendedFullViewingKey.from_encoded(encoded)
    assert key.network == network
    assert key.encoded == encoded
    assert str(key) == encoded

def test_sapling_extended_full_viewing_key_cannot_derive():
    key = zip32_sapling.ExtendedFullViewingKey.from_encoded(SAPLING_XFVK_MAIN)
    with pytest.raises(UnsupportedDerivationError):
        key.derive(harden(0))

def test_sapling_extended_key_wrong_hrp():
    data = Bech32.decode(SAPLING_XFVK_MAIN)[1]
    encoded = Bech32.encode("zxviewz", data)
    assert zip32_sapling.ExtendedFullViewingKey.try_from_encoded(encoded).error == DecodeError.UNRECOGNIZED_HRP

def test_sapling_extended_key_wrong_length():
    encoded = Bech32.encode("zxviews", bytes(168))
    assert zip32_sapling.ExtendedFullViewingKey.try_from_encoded(encoded).error == DecodeError.UNEXPECTED_LENGTH

def test_sapling_extended_key_inconsistent_master():
    data = bytearray(Bech32.decode(SAPLING_XFVK_MAIN)[1])
    data[0] = 0
    data[1:5] = b'\x01\x02\x03\x04'
    encoded = Bech32.encode("zxviews", bytes(data))
    result = zip32_sapling.ExtendedFullViewingKey.try_from_encoded(encoded)
    assert result.error == DecodeError.INVALID_DERIVATION_DATA
    with pytest.raises(FormatError):
        zip32_sapling.ExtendedFullViewingKey.from_encoded(encoded)

def test_sapling_spending_key_encoding_round_trip(seed, backend):
    account = zip32_sapling.ExtendedSpendingKey.create_account(seed, 0, Network.TESTNET)
    encoded = account.encoded
    assert encoded.startswith("secret-extended-key-test1")
    restored = zip32_sapling.ExtendedSpendingKey.from_encoded(encoded)
    assert restored == account
    assert restored.network == Network.TESTNET

def test_sapling_spending_key_exports_extended_full_viewing_key(seed, backend):
    account = zip32_sapling.ExtendedSpendingKey.create_account(seed)
    xfvk = account.extended_full_viewing_key
    assert xfvk.encoded.startswith("zxviews1")
    restored = zip32_sapling.ExtendedFullViewingKey.from_encoded(xfvk.encoded)
    assert restored == xfvk
    assert restored.depth == 3
    assert restored.fingerprint == account.fingerprint

def test_repr_hides_key_material(seed):
    key = zip32_orchard.ExtendedSpendingKey.create(seed)
    assert key.spending_key.sk.hex() not in repr(key)
    assert "orchard" in repr(key)

def test_sapling_master_key_vector(no_backend):
    key = zip32_sapling.ExtendedSpendingKey.create(bytes(range(32)))
    expsk = key.expanded_spending_key
    assert expsk.ask.hex() == "b6c00c93d36032b9a268e99e86a860776560bf0e83c1a10b51f607c954742506"
    assert expsk.nsk.hex() == "8204ede83b2f1fbd84f9b45d7f996e2ebd0a030ad243b48ed39f748a8821ea06"
    assert expsk.ovk.hex() == "395884890323b9d4933c021db89bcf767df21977b2ff0683848321a4df4afb21"
    assert key.dk.hex() == "77c17cb75b7796afb39f0f3e91c924607da56fa9a20e283509bc8a3ef996a172"
    assert key.chain_code.hex() == "d0947c4b03bf72a37ab44f72276d1cf3fdcd7ebf3e73348b7e550d752018668e"

def _orchard_reference_child(sk, chain_code, index):
    h = hashlib.blake2b(digest_size=64, person=b"Zcash_ExpandSeed")
    h.update(chain_code + bytes([0x81]) + sk + struct.pack('<I', index))
    digest = h.digest()
    return digest[:32], digest[32:]

def test_orchard_account_key_follows_master_and_child_formulas(backend):
    seed = bytes(range(32))
    digest = hashlib.blake2b(seed, digest_size=64, person=b"ZcashIP32Orchard").digest()
    sk, chain_code = digest[:32], digest[32:]
    master = zip32_orchard.ExtendedSpendingKey.create(seed)
    assert master.spending_key.sk == sk
    assert master.chain_code == chain_code

    for index in (harden(32), harden(133), harden(0)):
        sk, chain_code = _orchard_reference_child(sk, chain_code, index)
    account = zip32_orchard.ExtendedSpendingKey.create_account(seed, 0)
    assert account.spending_key.sk == sk
    assert account.chain_code == chain_code

def test_sapling_internal_key_matches_internal_viewing_key(seed, backend):
    account = zip32_sapling.ExtendedSpendingKey.create_account(seed)
    internal = account.derive_internal()
    assert internal.full_viewing_key == account.full_viewing_key.derive_internal()
    assert internal.derivation == account.derivation
    assert internal.expanded_spending_key.ask == account.expanded_spending_key.ask
    assert internal.expanded_spending_key.nsk != account.expanded_spending_key.nsk
    assert internal.dk != account.dk
    assert internal.expanded_spending_key.ovk != account.expanded_spending_key.ovk
    assert 'sapling_internal_nk' in backend.calls

def test_sapling_extended_key_with_invalid_ak():
    data = bytearray(Bech32.decode(SAPLING_XFVK_MAIN)[1])
    data[41:73] = b'\x01' + bytes(31)
    result = zip32_sapling.ExtendedFullViewingKey.try_from_encoded(Bech32.encode("zxviews", bytes(data)))
    assert result.error == DecodeError.INVALID_KEY
