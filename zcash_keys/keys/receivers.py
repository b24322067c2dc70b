# zcash_keys/keys/receivers.py
from dataclasses import dataclass

from zcash_keys.core.zcash_types import Network, Pool
from zcash_keys.keys.elements import ElementRegistry, UnifiedContainerKind, UnifiedTypeCode

def _require_length(name: str, data: bytes, expected: int) -> bytes:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f"{name} must be bytes, got {type(data).__name__}")
    if len(data) != expected:
        raise ValueError(f"{name} must be {expected} bytes, got {len(data)}")
    return bytes(data)

class _FixedReceiver:
    """Shared behaviour of the fixed-length receiver value types"""

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(self.data)
        return len(self.data)

    @classmethod
    def read_unified_data(cls, data: bytes, network: Network):
        return cls(bytes(data))

    def __bytes__(self) -> bytes:
        return self.data

@dataclass(frozen=True)
class TransparentP2PKHReceiver(_FixedReceiver):
    """HASH160 of a compressed secp256k1 public key"""
    data: bytes

    pool = Pool.TRANSPARENT
    unified_type_code = UnifiedTypeCode.P2PKH
    unified_data_length = 20

    def __post_init__(self):
        object.__setattr__(self, 'data', _require_length("P2PKH receiver", self.data, 20))

    @property
    def validating_key_hash(self) -> bytes:
        return self.data

@dataclass(frozen=True)
class TransparentP2SHReceiver(_FixedReceiver):
    """HASH160 of a redeem script"""
    data: bytes

    pool = Pool.TRANSPARENT
    unified_type_code = UnifiedTypeCode.P2SH
    unified_data_length = 20

    def __post_init__(self):
        object.__setattr__(self, 'data', _require_length("P2SH receiver", self.data, 20))

    @property
    def script_hash(self) -> bytes:
        return self.data

@dataclass(frozen=True)
class SaplingReceiver(_FixedReceiver):
    """11-byte diversifier followed by the 32-byte encoding of pk_d"""
    data: bytes

    pool = Pool.SAPLING
    unified_type_code = UnifiedTypeCode.SAPLING
    unified_data_length = 43

    def __post_init__(self):
        object.__setattr__(self, 'data', _require_length("Sapling receiver", self.data, 43))

    @property
    def diversifier(self) -> bytes:
        return self.data[:11]

    @property
    def pk_d(self) -> bytes:
        return self.data[11:]

@dataclass(frozen=True)
class OrchardReceiver(_FixedReceiver):
    """11-byte diversifier followed by the 32-byte encoding of pk_d"""
    data: bytes

    pool = Pool.ORCHARD
    unified_type_code = UnifiedTypeCode.ORCHARD
    unified_data_length = 43

    def __post_init__(self):
        object.__setattr__(self, 'data', _require_length("Orchard receiver", self.data, 43))

    @property
    def diversifier(self) -> bytes:
        return self.data[:11]

    @property
    def pk_d(self) -> bytes:
        return self.data[11:]

@dataclass(frozen=True)
class SproutReceiver:
    """Paying key a_pk followed by the transmission key pk_enc"""
    data: bytes

    pool = Pool.SPROUT

    def __post_init__(self):
        object.__setattr__(self, 'data', _require_length("Sprout receiver", self.data, 64))

    @property
    def paying_key(self) -> bytes:
        return self.data[:32]

    @property
    def transmission_key(self) -> bytes:
        return self.data[32:]

    def __bytes__(self) -> bytes:
        return self.data

for _receiver in (TransparentP2PKHReceiver, TransparentP2SHReceiver, SaplingReceiver, OrchardReceiver):
    ElementRegistry.register(UnifiedContainerKind.ADDRESS, _receiver)
