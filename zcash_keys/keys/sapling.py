# zcash_keys/keys/sapling.py
from dataclasses import dataclass
from functools import cached_property
from typing import Optional, Tuple

from zcash_keys.core.exceptions import InvalidKeyError
from zcash_keys.core.zcash_types import Network, Pool
from zcash_keys.crypto.blake2 import (
    JUBJUB_BASE_ORDER, JUBJUB_ORDER, PrfExpandCode,
    blake2b, int_to_le_bytes, le_bytes_to_int, prf_expand, to_scalar_jubjub
)
from zcash_keys.interfaces.crypto_backend import call_backend
from zcash_keys.keys.diversifier import DiversifierIndex
from zcash_keys.keys.elements import ElementRegistry, UnifiedContainerKind, UnifiedTypeCode
from zcash_keys.keys.receivers import SaplingReceiver
from zcash_keys.utils.logging import get_logger

logger = get_logger(__name__)

FINGERPRINT_PERSONALIZATION = b"ZcashSaplingFVFP"
INTERNAL_PERSONALIZATION = b"Zcash_SaplingInt"

# Twisted Edwards coefficient of Jubjub: -u^2 + v^2 = 1 + d u^2 v^2
JUBJUB_D = (-10240 * pow(10241, -1, JUBJUB_BASE_ORDER)) % JUBJUB_BASE_ORDER
JUBJUB_IDENTITY = b'\x01' + bytes(31)

def is_jubjub_point(encoding: bytes) -> bool:
    """
    True when ``encoding`` is a canonical repr_J of a point on Jubjub.

    The low 255 bits hold v and the top bit holds the parity of u. Membership
    in the prime-order subgroup is left to the crypto backend.
    """
    value = le_bytes_to_int(encoding)
    u_is_odd = value >> 255
    v = value & ((1 << 255) - 1)
    if v >= JUBJUB_BASE_ORDER:
        return False
    q = JUBJUB_BASE_ORDER
    v2 = v * v % q
    u2 = (v2 - 1) * pow(JUBJUB_D * v2 + 1, -1, q) % q
    if u2 == 0:
        return not u_is_odd
    return pow(u2, (q - 1) // 2, q) == 1

def internal_key_material(dfvk_bytes: bytes) -> Tuple[int, bytes, bytes]:
    """i_nsk and the internal (dk, ovk) for the 128-byte encoding of an external key"""
    i = blake2b(dfvk_bytes, INTERNAL_PERSONALIZATION, digest_size=32)
    i_nsk = to_scalar_jubjub(prf_expand(i, PrfExpandCode.SAPLING_INTERNAL_NSK))
    r = prf_expand(i, PrfExpandCode.SAPLING_INTERNAL_DK_OVK)
    return i_nsk, r[:32], r[32:]

def _require_32(name: str, value: bytes) -> bytes:
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return bytes(value)

def _require_scalar(name: str, value: bytes) -> bytes:
    value = _require_32(name, value)
    if le_bytes_to_int(value) >= JUBJUB_ORDER:
        raise ValueError(f"{name} is not a canonical Jubjub scalar")
    return value

@dataclass(frozen=True)
class ExpandedSpendingKey:
    """Sapling expanded spending key (ask, nsk, ovk)"""
    ask: bytes
    nsk: bytes
    ovk: bytes
    network: Network = Network.MAINNET

    pool = Pool.SAPLING

    def __post_init__(self):
        object.__setattr__(self, 'ask', _require_scalar("ask", self.ask))
        object.__setattr__(self, 'nsk', _require_scalar("nsk", self.nsk))
        object.__setattr__(self, 'ovk', _require_32("ovk", self.ovk))

    def __repr__(self) -> str:
        return f"ExpandedSpendingKey(network={self.network.value})"

    @classmethod
    def from_spending_key(cls, sk: bytes, network: Network = Network.MAINNET) -> 'ExpandedSpendingKey':
        sk = _require_32("Sapling spending key", sk)
        return cls(
            int_to_le_bytes(to_scalar_jubjub(prf_expand(sk, PrfExpandCode.SAPLING_ASK))),
            int_to_le_bytes(to_scalar_jubjub(prf_expand(sk, PrfExpandCode.SAPLING_NSK))),
            prf_expand(sk, PrfExpandCode.SAPLING_OVK)[:32],
            network,
        )

    @classmethod
    def from_bytes(cls, data: bytes, network: Network = Network.MAINNET) -> 'ExpandedSpendingKey':
        if len(data) != 96:
            raise ValueError(f"Sapling expanded spending key must be 96 bytes, got {len(data)}")
        return cls(data[:32], data[32:64], data[64:], network)

    def to_bytes(self) -> bytes:
        return self.ask + self.nsk + self.ovk

    @cached_property
    def full_viewing_key(self) -> 'FullViewingKey':
        result = call_backend('sapling_ak_nk', self.ask, self.nsk)
        if result is None:
            raise InvalidKeyError("Crypto backend rejected the Sapling expanded spending key")
        ak, nk = result
        return FullViewingKey(ak, nk, self.ovk, self.network)

@dataclass(frozen=True)
class FullViewingKey:
    """Sapling full viewing key (ak, nk, ovk), without a diversifier key"""
    ak: bytes
    nk: bytes
    ovk: bytes
    network: Network = Network.MAINNET

    def __post_init__(self):
        object.__setattr__(self, 'ak', _require_32("ak", self.ak))
        object.__setattr__(self, 'nk', _require_32("nk", self.nk))
        object.__setattr__(self, 'ovk', _require_32("ovk", self.ovk))

    @classmethod
    def from_bytes(cls, data: bytes, network: Network = Network.MAINNET) -> 'FullViewingKey':
        """Parse 96 bytes, rejecting ak and nk that are not canonical Jubjub points"""
        if len(data) != 96:
            raise ValueError(f"Sapling full viewing key must be 96 bytes, got {len(data)}")
        ak, nk = data[:32], data[32:64]
        if not is_jubjub_point(ak) or ak == JUBJUB_IDENTITY:
            raise ValueError("ak is not a valid Jubjub point")
        if not is_jubjub_point(nk):
            raise ValueError("nk is not a valid Jubjub point")
        return cls(ak, nk, data[64:], network)

    def to_bytes(self) -> bytes:
        return self.ak + self.nk + self.ovk

    @property
    def fingerprint(self) -> bytes:
        return blake2b(self.to_bytes(), FINGERPRINT_PERSONALIZATION, digest_size=32)

    @cached_property
    def ivk(self) -> bytes:
        ivk = call_backend('sapling_ivk', self.ak, self.nk)
        if ivk is None:
            raise InvalidKeyError("Sapling full viewing key has no valid incoming viewing key")
        return ivk

@dataclass(frozen=True)
class DiversifiableFullViewingKey:
    """Sapling full viewing key together with its diversifier key dk"""
    full_viewing_key: FullViewingKey
    dk: bytes

    pool = Pool.SAPLING
    unified_type_code = UnifiedTypeCode.SAPLING
    unified_data_length = 128

    def __post_init__(self):
        object.__setattr__(self, 'dk', _require_32("dk", self.dk))

    @property
    def network(self) -> Network:
        return self.full_viewing_key.network

    @property
    def ovk(self) -> bytes:
        return self.full_viewing_key.ovk

    @property
    def fingerprint(self) -> bytes:
        return self.full_viewing_key.fingerprint

    @classmethod
    def from_bytes(cls, data: bytes, network: Network = Network.MAINNET) -> 'DiversifiableFullViewingKey':
        if len(data) != 128:
            raise ValueError(f"Sapling diversifiable full viewing key must be 128 bytes, got {len(data)}")
        return cls(FullViewingKey.from_bytes(data[:96], network), data[96:])

    def to_bytes(self) -> bytes:
        return self.full_viewing_key.to_bytes() + self.dk

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(self.to_bytes())
        return self.unified_data_length

    @classmethod
    def read_unified_data(cls, data: bytes, network: Network) -> 'DiversifiableFullViewingKey':
        return cls.from_bytes(data, network)

    @cached_property
    def incoming_viewing_key(self) -> 'IncomingViewingKey':
        return IncomingViewingKey(self.dk, self.full_viewing_key.ivk, self.network)

    def derive_internal(self) -> 'DiversifiableFullViewingKey':
        """The internal (change) key: nk + [i_nsk] H, with fresh dk and ovk"""
        i_nsk, dk, ovk = internal_key_material(self.to_bytes())
        fvk = self.full_viewing_key
        nk = call_backend('sapling_internal_nk', fvk.nk, int_to_le_bytes(i_nsk))
        if nk is None:
            raise InvalidKeyError("Crypto backend rejected the Sapling internal nullifier key")
        return DiversifiableFullViewingKey(FullViewingKey(fvk.ak, nk, ovk, fvk.network), dk)

    def try_create_receiver(self, diversifier_index=0) -> Optional[SaplingReceiver]:
        return self.incoming_viewing_key.try_create_receiver(diversifier_index)

    def create_receiver(self, diversifier_index=0) -> SaplingReceiver:
        return self.incoming_viewing_key.create_receiver(diversifier_index)

    def find_receiver(self, start_index=0) -> Tuple[DiversifierIndex, SaplingReceiver]:
        return self.incoming_viewing_key.find_receiver(start_index)

    def create_default_receiver(self) -> SaplingReceiver:
        return self.incoming_viewing_key.create_default_receiver()

    def check_receiver(self, receiver: SaplingReceiver) -> bool:
        return self.incoming_viewing_key.check_receiver(receiver)

    def try_get_diversifier_index(self, receiver: SaplingReceiver) -> Optional[DiversifierIndex]:
        return self.incoming_viewing_key.try_get_diversifier_index(receiver)

@dataclass(frozen=True)
class IncomingViewingKey:
    """Sapling incoming viewing key with its diversifier key (dk, ivk)"""
    dk: bytes
    ivk: bytes
    network: Network = Network.MAINNET

    pool = Pool.SAPLING
    unified_type_code = UnifiedTypeCode.SAPLING
    unified_data_length = 64

    def __post_init__(self):
        object.__setattr__(self, 'dk', _require_32("dk", self.dk))
        object.__setattr__(self, 'ivk', _require_32("ivk", self.ivk))

    @classmethod
    def from_bytes(cls, data: bytes, network: Network = Network.MAINNET) -> 'IncomingViewingKey':
        if len(data) != 64:
            raise ValueError(f"Sapling incoming viewing key must be 64 bytes, got {len(data)}")
        # CRH^ivk output is truncated to 251 bits
        if data[63] & 0xf8:
            raise ValueError("ivk is not a canonical 251-bit value")
        return cls(data[:32], data[32:], network)

    def to_bytes(self) -> bytes:
        return self.dk + self.ivk

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(self.to_bytes())
        return self.unified_data_length

    @classmethod
    def read_unified_data(cls, data: bytes, network: Network) -> 'IncomingViewingKey':
        return cls.from_bytes(data, network)

    def try_create_receiver(self, diversifier_index=0) -> Optional[SaplingReceiver]:
        """The receiver at this index, or None when the index has no valid diversifier"""
        index = DiversifierIndex.of(diversifier_index)
        raw = call_backend('sapling_receiver', self.dk, self.ivk, index.to_bytes())
        return None if raw is None else SaplingReceiver(raw)

    def create_receiver(self, diversifier_index=0) -> SaplingReceiver:
        receiver = self.try_create_receiver(diversifier_index)
        if receiver is None:
            raise InvalidKeyError(
                f"Diversifier index {int(DiversifierIndex.of(diversifier_index))} does not yield a Sapling receiver")
        return receiver

    def find_receiver(self, start_index=0) -> Tuple[DiversifierIndex, SaplingReceiver]:
        """First valid receiver at or after ``start_index``"""
        index = DiversifierIndex.of(start_index)
        while True:
            receiver = self.try_create_receiver(index)
            if receiver is not None:
                return index, receiver
            logger.debug("Skipping invalid Sapling diversifier", index=index.value)
            try:
                index = index.increment()
            except OverflowError as e:
                raise InvalidKeyError("No valid Sapling diversifier at or above the requested index") from e

    def create_default_receiver(self) -> SaplingReceiver:
        """Receiver at the first valid diversifier index, starting from zero"""
        return self.find_receiver(0)[1]

    def try_get_diversifier_index(self, receiver: SaplingReceiver) -> Optional[DiversifierIndex]:
        raw = call_backend('sapling_diversifier_index', self.dk, self.ivk, receiver.data)
        return None if raw is None else DiversifierIndex.from_bytes(raw)

    def check_receiver(self, receiver: SaplingReceiver) -> bool:
        return self.try_get_diversifier_index(receiver) is not None

ElementRegistry.register(UnifiedContainerKind.FULL_VIEWING_KEY, DiversifiableFullViewingKey)
ElementRegistry.register(UnifiedContainerKind.INCOMING_VIEWING_KEY, IncomingViewingKey)
