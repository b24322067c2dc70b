import hashlib

import pytest

from zcash_keys.crypto.blake2 import JUBJUB_ORDER
from zcash_keys.interfaces.crypto_backend import CryptoBackend, set_backend
from zcash_keys.keys.sapling import JUBJUB_IDENTITY, is_jubjub_point

# BIP-39 test mnemonic ("abandon ... about") and a fixed 64-byte seed
TEST_MNEMONIC = "abandon " * 11 + "about"
TEST_SEED = bytes(range(64))

def _h(tag: bytes, *parts: bytes, size: int = 32) -> bytes:
    return hashlib.blake2b(b"".join(parts), digest_size=size, person=tag.ljust(16, b"\x00")).digest()

def _xor(a: bytes, b: bytes) -> bytes:
    return bytes(x ^ y for x, y in zip(a, b))

def _jubjub_point(tag: bytes, data: bytes) -> bytes:
    """First hash of ``data`` that is a canonical non-identity Jubjub encoding"""
    counter = 0
    while True:
        candidate = _h(tag, data, bytes([counter]))
        if is_jubjub_point(candidate) and candidate != JUBJUB_IDENTITY:
            return candidate
        counter += 1

def sapling_index_is_valid(index_bytes: bytes) -> bool:
    """Indexes congruent to 1 mod 3 have no Sapling diversifier in the fake"""
    return int.from_bytes(index_bytes, 'little') % 3 != 1

class FakeBackend(CryptoBackend):
    """
    Deterministic stand-in for the curve arithmetic.

    A receiver is ``d || pk_d`` with ``d = index XOR H(dk)`` and
    ``pk_d = H(ivk || d)``, so trial decryption recovers the index and
    verifies it against the key.
    """

    def __init__(self):
        self.calls = []
        self._nsk_by_nk = {}

    def _receiver(self, pool: bytes, dk: bytes, ivk: bytes, index: bytes) -> bytes:
        d = _xor(index, _h(b"fake-d" + pool, dk, size=11))
        return d + _h(b"fake-pkd" + pool, ivk, d)

    def _index(self, pool: bytes, dk: bytes, ivk: bytes, receiver: bytes):
        d = receiver[:11]
        index = _xor(d, _h(b"fake-d" + pool, dk, size=11))
        if self._receiver(pool, dk, ivk, index) != bytes(receiver):
            return None
        return index

    def orchard_ak(self, ask):
        self.calls.append('orchard_ak')
        ak = bytearray(_h(b"fake-ak", ask))
        ak[31] &= 0x3f
        return bytes(ak)

    def orchard_ivk(self, ak, nk, rivk):
        self.calls.append('orchard_ivk')
        ivk = bytearray(_h(b"fake-ivk-o", ak, nk, rivk))
        ivk[31] &= 0x3f
        ivk[0] |= 0x01
        return bytes(ivk)

    def orchard_receiver(self, dk, ivk, diversifier_index):
        self.calls.append('orchard_receiver')
        return self._receiver(b"o", dk, ivk, diversifier_index)

    def orchard_diversifier_index(self, dk, ivk, receiver):
        self.calls.append('orchard_diversifier_index')
        return self._index(b"o", dk, ivk, receiver)

    def sapling_ak_nk(self, ask, nsk):
        self.calls.append('sapling_ak_nk')
        return _jubjub_point(b"fake-ak-s", ask), self._nk(int.from_bytes(nsk, 'little'))

    def _nk(self, nsk: int) -> bytes:
        nk = _jubjub_point(b"fake-nk-s", nsk.to_bytes(32, 'little'))
        self._nsk_by_nk[nk] = nsk
        return nk

    def sapling_internal_nk(self, nk, i_nsk):
        """Only keys whose nsk passed through sapling_ak_nk can be offset"""
        self.calls.append('sapling_internal_nk')
        nsk = self._nsk_by_nk.get(bytes(nk))
        if nsk is None:
            return None
        return self._nk((nsk + int.from_bytes(i_nsk, 'little')) % JUBJUB_ORDER)

    def sapling_ivk(self, ak, nk):
        self.calls.append('sapling_ivk')
        ivk = bytearray(_h(b"fake-ivk-s", ak, nk))
        ivk[31] &= 0x07
        ivk[0] |= 0x01
        return bytes(ivk)

    def sapling_receiver(self, dk, ivk, diversifier_index):
        self.calls.append('sapling_receiver')
        if not sapling_index_is_valid(diversifier_index):
            return None
        return self._receiver(b"s", dk, ivk, diversifier_index)

    def sapling_diversifier_index(self, dk, ivk, receiver):
        self.calls.append('sapling_diversifier_index')
        index = self._index(b"s", dk, ivk, receiver)
        if index is None or not sapling_index_is_valid(index):
            return None
        return index

@pytest.fixture
def backend():
    """Install the fake backend for one test"""
    fake = FakeBackend()
    previous = set_backend(fake)
    yield fake
    set_backend(previous)

@pytest.fixture
def no_backend():
    previous = set_backend(None)
    yield
    set_backend(previous)

@pytest.fixture
def seed():
    return TEST_SEED

@pytest.fixture
def mnemonic_phrase():
    return TEST_MNEMONIC
