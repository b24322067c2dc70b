# zcash_keys/crypto/blake2.py
import hashlib
import struct
from enum import IntEnum

# Group orders of the scalar fields keys are reduced into
JUBJUB_ORDER = 0x0e7db4ea6533afa906673b0101343b00a6682093ccc81082d0970e5ed6f72cb7
PALLAS_SCALAR_ORDER = 0x40000000000000000000000000000000224698fc0994a8dd8c46eb2100000001
PALLAS_BASE_ORDER = 0x40000000000000000000000000000000224698fc094cf91b992d30ed00000001
# Base field of Jubjub (the BLS12-381 scalar field)
JUBJUB_BASE_ORDER = 0x73eda753299d7d483339d80809a1d80553bda402fffe5bfeffffffff00000001

PRF_EXPAND_PERSONALIZATION = b"Zcash_ExpandSeed"

class PrfExpandCode(IntEnum):
    """Domain separators for PRF^expand"""
    SAPLING_ASK = 0x00
    SAPLING_NSK = 0x01
    SAPLING_OVK = 0x02
    ESK = 0x04
    RCM = 0x05
    ORCHARD_ASK = 0x06
    ORCHARD_NK = 0x07
    ORCHARD_RIVK = 0x08
    PSI = 0x09
    SAPLING_DK = 0x10
    SAPLING_EXT_SK = 0x11
    SAPLING_EXT_FVK = 0x12
    SAPLING_ASK_DERIVE = 0x13
    SAPLING_NSK_DERIVE = 0x14
    SAPLING_OVK_DERIVE = 0x15
    SAPLING_DK_DERIVE = 0x16
    SAPLING_INTERNAL_NSK = 0x17
    SAPLING_INTERNAL_DK_OVK = 0x18
    ORCHARD_ZIP32_CHILD = 0x81
    ORCHARD_DK_OVK = 0x82
    ORCHARD_RIVK_INTERNAL = 0x83

def blake2b(data: bytes, person: bytes, digest_size: int = 64) -> bytes:
    """Personalized BLAKE2b"""
    return hashlib.blake2b(data, digest_size=digest_size, person=person).digest()

def prf_expand(key: bytes, code: int, *parts: bytes) -> bytes:
    """PRF^expand(key, [code] || parts): 64 bytes of BLAKE2b-512 output"""
    h = hashlib.blake2b(digest_size=64, person=PRF_EXPAND_PERSONALIZATION)
    h.update(key)
    h.update(bytes([code]))
    for part in parts:
        h.update(part)
    return h.digest()

def le_bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, 'little')

def int_to_le_bytes(value: int, length: int = 32) -> bytes:
    return value.to_bytes(length, 'little')

def le32(value: int) -> bytes:
    return struct.pack('<I', value)

def to_scalar_jubjub(data: bytes) -> int:
    """ToScalar for Sapling: little-endian integer reduced mod the Jubjub order"""
    return le_bytes_to_int(data) % JUBJUB_ORDER

def to_scalar_pallas(data: bytes) -> int:
    """ToScalar for Orchard: little-endian integer reduced mod the Pallas scalar order"""
    return le_bytes_to_int(data) % PALLAS_SCALAR_ORDER

def to_base_pallas(data: bytes) -> int:
    """ToBase for Orchard: little-endian integer reduced mod the Pallas base field order"""
    return le_bytes_to_int(data) % PALLAS_BASE_ORDER
