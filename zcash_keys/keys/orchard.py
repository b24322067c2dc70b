# zcash_keys/keys/orchard.py
from dataclasses import dataclass
from functools import cached_property
from typing import Optional

from zcash_keys.core.exceptions import InvalidKeyError
from zcash_keys.core.zcash_types import DecodeError, DecodeResult, Network, Pool
from zcash_keys.crypto.bech32 import Bech32m
from zcash_keys.crypto.blake2 import (
    PALLAS_BASE_ORDER, PALLAS_SCALAR_ORDER, PrfExpandCode,
    blake2b, int_to_le_bytes, le_bytes_to_int, prf_expand, to_base_pallas, to_scalar_pallas
)
from zcash_keys.interfaces.crypto_backend import call_backend
from zcash_keys.keys.diversifier import DiversifierIndex
from zcash_keys.keys.elements import ElementRegistry, UnifiedContainerKind, UnifiedTypeCode
from zcash_keys.keys.receivers import OrchardReceiver
from zcash_keys.utils.logging import register_secret

FINGERPRINT_PERSONALIZATION = b"ZcashOrchardFVFP"

def _require_32(name: str, value: bytes) -> bytes:
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return bytes(value)

@dataclass(frozen=True)
class SpendingKey:
    """Orchard spending key sk"""
    sk: bytes
    network: Network = Network.MAINNET

    MAINNET_HRP = "secret-orchard-sk-main"
    TESTNET_HRP = "secret-orchard-sk-test"
    pool = Pool.ORCHARD

    def __post_init__(self):
        object.__setattr__(self, 'sk', _require_32("Orchard spending key", self.sk))

    def __repr__(self) -> str:
        return f"SpendingKey(network={self.network.value})"

    @cached_property
    def ask(self) -> int:
        return to_scalar_pallas(prf_expand(self.sk, PrfExpandCode.ORCHARD_ASK))

    @cached_property
    def full_viewing_key(self) -> 'FullViewingKey':
        if self.ask == 0:
            raise InvalidKeyError("Orchard spending key yields a zero spend authorizing key")
        ak = call_backend('orchard_ak', int_to_le_bytes(self.ask))
        if ak is None:
            raise InvalidKeyError("Crypto backend rejected the Orchard spend authorizing key")
        nk = to_base_pallas(prf_expand(self.sk, PrfExpandCode.ORCHARD_NK))
        rivk = to_scalar_pallas(prf_expand(self.sk, PrfExpandCode.ORCHARD_RIVK))
        return FullViewingKey(ak, int_to_le_bytes(nk), int_to_le_bytes(rivk), self.network)

    @property
    def incoming_viewing_key(self) -> 'IncomingViewingKey':
        return self.full_viewing_key.incoming_viewing_key

    @property
    def encoded(self) -> str:
        hrp = self.MAINNET_HRP if self.network == Network.MAINNET else self.TESTNET_HRP
        encoded = Bech32m.encode(hrp, self.sk)
        register_secret(encoded)
        return encoded

    @classmethod
    def try_from_encoded(cls, encoded: str) -> DecodeResult:
        result = Bech32m.try_decode(encoded, max_data_length=32)
        if not result.success:
            return result
        hrp, data = result.value
        networks = {cls.MAINNET_HRP: Network.MAINNET, cls.TESTNET_HRP: Network.TESTNET}
        if hrp not in networks:
            return DecodeResult.failure(DecodeError.UNRECOGNIZED_HRP, f"Unexpected bech32 tag: {hrp}")
        if len(data) != 32:
            return DecodeResult.failure(DecodeError.UNEXPECTED_LENGTH,
                                        f"Orchard spending key must be 32 bytes, got {len(data)}")
        return DecodeResult.ok(cls(data, networks[hrp]))

    @classmethod
    def from_encoded(cls, encoded: str) -> 'SpendingKey':
        return cls.try_from_encoded(encoded).unwrap()

@dataclass(frozen=True)
class FullViewingKey:
    """Orchard full viewing key (ak, nk, rivk)"""
    ak: bytes
    nk: bytes
    rivk: bytes
    network: Network = Network.MAINNET

    pool = Pool.ORCHARD
    unified_type_code = UnifiedTypeCode.ORCHARD
    unified_data_length = 96

    def __post_init__(self):
        object.__setattr__(self, 'ak', _require_32("ak", self.ak))
        object.__setattr__(self, 'nk', _require_32("nk", self.nk))
        object.__setattr__(self, 'rivk', _require_32("rivk", self.rivk))

    @classmethod
    def from_bytes(cls, data: bytes, network: Network = Network.MAINNET) -> 'FullViewingKey':
        """Parse 96 bytes, rejecting non-canonical field and scalar encodings"""
        if len(data) != 96:
            raise ValueError(f"Orchard full viewing key must be 96 bytes, got {len(data)}")
        ak, nk, rivk = data[:32], data[32:64], data[64:]
        # ak is an x-coordinate with its sign bit cleared
        if ak[31] & 0x80 or le_bytes_to_int(ak) >= PALLAS_BASE_ORDER:
            raise ValueError("ak is not a canonical encoding")
        if le_bytes_to_int(nk) >= PALLAS_BASE_ORDER:
            raise ValueError("nk is not a canonical field element")
        if le_bytes_to_int(rivk) >= PALLAS_SCALAR_ORDER:
            raise ValueError("rivk is not a canonical scalar")
        return cls(ak, nk, rivk, network)

    def to_bytes(self) -> bytes:
        return self.ak + self.nk + self.rivk

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(self.to_bytes())
        return self.unified_data_length

    @classmethod
    def read_unified_data(cls, data: bytes, network: Network) -> 'FullViewingKey':
        return cls.from_bytes(data, network)

    @property
    def fingerprint(self) -> bytes:
        """BLAKE2b-256 fingerprint identifying this key in ZIP-32 trees"""
        return blake2b(self.to_bytes(), FINGERPRINT_PERSONALIZATION, digest_size=32)

    def _dk_ovk(self) -> bytes:
        return prf_expand(self.rivk, PrfExpandCode.ORCHARD_DK_OVK, self.ak, self.nk)

    @property
    def dk(self) -> bytes:
        """Diversifier key"""
        return self._dk_ovk()[:32]

    @property
    def ovk(self) -> bytes:
        """Outgoing viewing key"""
        return self._dk_ovk()[32:]

    @cached_property
    def incoming_viewing_key(self) -> 'IncomingViewingKey':
        ivk = call_backend('orchard_ivk', self.ak, self.nk, self.rivk)
        if ivk is None:
            raise InvalidKeyError("Orchard full viewing key has no valid incoming viewing key")
        return IncomingViewingKey(self.dk, ivk, self.network)

    def derive_internal(self) -> 'FullViewingKey':
        """The internal (change) full viewing key for this account"""
        rivk_internal = to_scalar_pallas(
            prf_expand(self.rivk, PrfExpandCode.ORCHARD_RIVK_INTERNAL, self.ak, self.nk))
        return FullViewingKey(self.ak, self.nk, int_to_le_bytes(rivk_internal), self.network)

    def create_receiver(self, diversifier_index=0) -> OrchardReceiver:
        return self.incoming_viewing_key.create_receiver(diversifier_index)

    def create_default_receiver(self) -> OrchardReceiver:
        return self.incoming_viewing_key.create_default_receiver()

    def check_receiver(self, receiver: OrchardReceiver) -> bool:
        return self.incoming_viewing_key.check_receiver(receiver)

    def try_get_diversifier_index(self, receiver: OrchardReceiver) -> Optional[DiversifierIndex]:
        return self.incoming_viewing_key.try_get_diversifier_index(receiver)

@dataclass(frozen=True)
class IncomingViewingKey:
    """Orchard incoming viewing key (dk, ivk)"""
    dk: bytes
    ivk: bytes
    network: Network = Network.MAINNET

    pool = Pool.ORCHARD
    unified_type_code = UnifiedTypeCode.ORCHARD
    unified_data_length = 64

    def __post_init__(self):
        object.__setattr__(self, 'dk', _require_32("dk", self.dk))
        object.__setattr__(self, 'ivk', _require_32("ivk", self.ivk))

    @classmethod
    def from_bytes(cls, data: bytes, network: Network = Network.MAINNET) -> 'IncomingViewingKey':
        if len(data) != 64:
            raise ValueError(f"Orchard incoming viewing key must be 64 bytes, got {len(data)}")
        ivk = le_bytes_to_int(data[32:])
        if not 0 < ivk < PALLAS_BASE_ORDER:
            raise ValueError("ivk is not a canonical non-zero field element")
        return cls(data[:32], data[32:], network)

    def to_bytes(self) -> bytes:
        return self.dk + self.ivk

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(self.to_bytes())
        return self.unified_data_length

    @classmethod
    def read_unified_data(cls, data: bytes, network: Network) -> 'IncomingViewingKey':
        return cls.from_bytes(data, network)

    def create_receiver(self, diversifier_index=0) -> OrchardReceiver:
        """Every diversifier index yields a valid Orchard receiver"""
        index = DiversifierIndex.of(diversifier_index)
        raw = call_backend('orchard_receiver', self.dk, self.ivk, index.to_bytes())
        if raw is None:
            raise InvalidKeyError("Crypto backend could not create an Orchard receiver")
        return OrchardReceiver(raw)

    def create_default_receiver(self) -> OrchardReceiver:
        return self.create_receiver(DiversifierIndex(0))

    def try_get_diversifier_index(self, receiver: OrchardReceiver) -> Optional[DiversifierIndex]:
        """Decrypt the receiver's diversifier; None when the receiver is not ours"""
        raw = call_backend('orchard_diversifier_index', self.dk, self.ivk, receiver.data)
        return None if raw is None else DiversifierIndex.from_bytes(raw)

    def check_receiver(self, receiver: OrchardReceiver) -> bool:
        return self.try_get_diversifier_index(receiver) is not None

ElementRegistry.register(UnifiedContainerKind.FULL_VIEWING_KEY, FullViewingKey)
ElementRegistry.register(UnifiedContainerKind.INCOMING_VIEWING_KEY, IncomingViewingKey)
