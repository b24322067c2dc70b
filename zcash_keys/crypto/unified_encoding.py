# zcash_keys/crypto/unified_encoding.py
"""
ZIP-316 unified encoding: typed items, each written as
``typecode || CompactSize(length) || data``, sorted by type code, followed by
16 bytes of HRP padding, F4Jumbled and rendered as Bech32m.
"""
import struct
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from zcash_keys.core.exceptions import InvalidKeyError
from zcash_keys.core.zcash_types import DecodeError, DecodeResult, Network
from zcash_keys.crypto.bech32 import Bech32m
from zcash_keys.crypto.f4jumble import f4jumble, f4jumble_inv, MIN_LENGTH, MAX_LENGTH
from zcash_keys.keys.elements import (
    ElementRegistry, METADATA_TYPE_CODES, UnifiedContainerKind, UnifiedTypeCode, UnknownElement
)
from zcash_keys.utils.logging import get_logger

logger = get_logger(__name__)

PADDING_LENGTH = 16

HUMAN_READABLE_PARTS: Dict[Tuple[UnifiedContainerKind, Network], str] = {
    (UnifiedContainerKind.ADDRESS, Network.MAINNET): "u",
    (UnifiedContainerKind.ADDRESS, Network.TESTNET): "utest",
    (UnifiedContainerKind.FULL_VIEWING_KEY, Network.MAINNET): "uview",
    (UnifiedContainerKind.FULL_VIEWING_KEY, Network.TESTNET): "uviewtest",
    (UnifiedContainerKind.INCOMING_VIEWING_KEY, Network.MAINNET): "uivk",
    (UnifiedContainerKind.INCOMING_VIEWING_KEY, Network.TESTNET): "uivktest",
}
_KIND_BY_HRP = {hrp: key for key, hrp in HUMAN_READABLE_PARTS.items()}

def human_readable_part(kind: UnifiedContainerKind, network: Network) -> str:
    return HUMAN_READABLE_PARTS[(kind, network)]

def container_for_hrp(hrp: str) -> Optional[Tuple[UnifiedContainerKind, Network]]:
    return _KIND_BY_HRP.get(hrp)

def write_compact_size(value: int) -> bytes:
    """Bitcoin CompactSize encoding"""
    if value < 0:
        raise ValueError("CompactSize cannot encode negative values")
    if value < 0xfd:
        return bytes([value])
    if value <= 0xffff:
        return b'\xfd' + struct.pack('<H', value)
    if value <= 0xffffffff:
        return b'\xfe' + struct.pack('<I', value)
    return b'\xff' + struct.pack('<Q', value)

def read_compact_size(data: bytes, offset: int) -> Optional[Tuple[int, int]]:
    """Returns ``(value, new_offset)``, or None for truncated or non-canonical input"""
    if offset >= len(data):
        return None
    prefix = data[offset]
    if prefix < 0xfd:
        return prefix, offset + 1

    fmt, size, minimum = {0xfd: ('<H', 2, 0xfd), 0xfe: ('<I', 4, 0x10000), 0xff: ('<Q', 8, 0x100000000)}[prefix]
    if offset + 1 + size > len(data):
        return None
    value = struct.unpack_from(fmt, data, offset + 1)[0]
    if value < minimum:
        return None
    return value, offset + 1 + size

@dataclass(frozen=True)
class UnifiedEncodingMetadata:
    """Must-understand metadata items that may accompany receivers or keys"""
    expiration_height: Optional[int] = None
    expiration_date: Optional[datetime] = None

    def __post_init__(self):
        if self.expiration_height is not None and not 0 <= self.expiration_height <= 0xffffffff:
            raise ValueError(f"Expiration height out of range: {self.expiration_height}")
        if self.expiration_date is not None:
            date = self.expiration_date
            if date.tzinfo is None:
                date = date.replace(tzinfo=timezone.utc)
            # Stored at whole-second precision
            object.__setattr__(self, 'expiration_date',
                               datetime.fromtimestamp(int(date.timestamp()), tz=timezone.utc))

    @property
    def is_empty(self) -> bool:
        return self.expiration_height is None and self.expiration_date is None

    def elements(self) -> List[UnknownElement]:
        items = []
        if self.expiration_height is not None:
            items.append(UnknownElement(UnifiedTypeCode.EXPIRATION_BY_HEIGHT,
                                        struct.pack('<I', self.expiration_height)))
        if self.expiration_date is not None:
            items.append(UnknownElement(UnifiedTypeCode.EXPIRATION_BY_UNIX_TIME,
                                        struct.pack('<Q', int(self.expiration_date.timestamp()))))
        return items

@dataclass(frozen=True)
class DecodedUnifiedEncoding:
    """Typed contents of a unified string"""
    kind: UnifiedContainerKind
    network: Network
    elements: Tuple = field(default_factory=tuple)
    metadata: UnifiedEncodingMetadata = field(default_factory=UnifiedEncodingMetadata)

class UnifiedEncoding:
    """Composes and decomposes unified encodings"""

    METADATA_LENGTHS = {
        UnifiedTypeCode.EXPIRATION_BY_HEIGHT: 4,
        UnifiedTypeCode.EXPIRATION_BY_UNIX_TIME: 8,
    }

    @classmethod
    def encode(cls, hrp: str, elements: Iterable, metadata: Optional[UnifiedEncodingMetadata] = None) -> str:
        """Sort ``elements`` by type code and render them under ``hrp``"""
        items = list(elements)
        if not items:
            raise ValueError("At least one element is required.")

        if metadata is not None:
            items.extend(metadata.elements())

        by_type_code = {}
        for element in items:
            type_code = element.unified_type_code
            if type_code in by_type_code:
                raise ValueError(
                    f"Only one element per type code is allowed, but {type_code:#04x} appeared more than once.")
            by_type_code[type_code] = element

        payload = bytearray()
        for type_code in sorted(by_type_code):
            element = by_type_code[type_code]
            body = bytearray()
            written = element.write_unified_data(body)
            if written != element.unified_data_length or written != len(body):
                raise ValueError(
                    f"Element {type_code:#04x} wrote {written} bytes but declares {element.unified_data_length}.")
            payload.append(type_code)
            payload.extend(write_compact_size(len(body)))
            payload.extend(body)

        payload.extend(cls._padding(hrp))
        return Bech32m.encode(hrp, f4jumble(bytes(payload)))

    @classmethod
    def try_decode_raw(cls, encoded: str) -> DecodeResult:
        """Decode to ``(hrp, [(type_code, data), ...])`` without interpreting items"""
        decoded = Bech32m.try_decode(encoded)
        if not decoded.success:
            return decoded
        hrp, data = decoded.value

        if len(hrp.encode('utf-8')) > PADDING_LENGTH:
            return DecodeResult.failure(DecodeError.UNRECOGNIZED_HRP, f"HRP too long for a unified encoding: {hrp}")

        if not MIN_LENGTH <= len(data) <= MAX_LENGTH:
            return DecodeResult.failure(
                DecodeError.UNEXPECTED_LENGTH,
                f"Unified encoding length {len(data)} is outside [{MIN_LENGTH}, {MAX_LENGTH}].")

        data = f4jumble_inv(data)
        if data[-PADDING_LENGTH:] != cls._padding(hrp):
            return DecodeResult.failure(DecodeError.BAD_PADDING, "Unified encoding padding does not match its HRP.")
        data = data[:-PADDING_LENGTH]

        items = []
        offset = 0
        previous_type_code = -1
        while offset < len(data):
            type_code = data[offset]
            header = read_compact_size(data, offset + 1)
            if header is None:
                return DecodeResult.failure(DecodeError.UNEXPECTED_LENGTH,
                                            f"Truncated length for item {type_code:#04x}.")
            length, offset = header
            if offset + length > len(data):
                return DecodeResult.failure(DecodeError.UNEXPECTED_LENGTH,
                                            f"Item {type_code:#04x} claims {length} bytes but fewer remain.")
            if type_code == previous_type_code:
                return DecodeResult.failure(DecodeError.TYPE_MISMATCH,
                                            f"Duplicate item type code {type_code:#04x}.")
            if type_code < previous_type_code:
                return DecodeResult.failure(DecodeError.TYPE_MISMATCH,
                                            f"Item type code {type_code:#04x} is out of order.")
            previous_type_code = type_code
            items.append((type_code, data[offset:offset + length]))
            offset += length

        return DecodeResult.ok((hrp, items))

    @classmethod
    def try_decode(cls, encoded: str, expected_kind: Optional[UnifiedContainerKind] = None) -> DecodeResult:
        """
        Decode and interpret every item through the element registry.

        Addresses keep unrecognised items as UnknownElement; viewing keys
        reject them with TYPE_MISMATCH.
        """
        raw = cls.try_decode_raw(encoded)
        if not raw.success:
            return raw
        hrp, items = raw.value

        container = container_for_hrp(hrp)
        if container is None:
            return DecodeResult.failure(DecodeError.UNRECOGNIZED_HRP, f"Unexpected unified HRP: {hrp}")
        kind, network = container
        if expected_kind is not None and kind != expected_kind:
            return DecodeResult.failure(DecodeError.TYPE_MISMATCH,
                                        f"Expected a unified {expected_kind.value} but found a {kind.value}.")

        elements = []
        expiration_height = None
        expiration_date = None
        for type_code, data in items:
            if type_code in METADATA_TYPE_CODES:
                if len(data) != cls.METADATA_LENGTHS[type_code]:
                    return DecodeResult.failure(DecodeError.UNEXPECTED_LENGTH,
                                                f"Metadata item {type_code:#04x} has length {len(data)}.")
                if type_code == UnifiedTypeCode.EXPIRATION_BY_HEIGHT:
                    expiration_height = struct.unpack('<I', data)[0]
                else:
                    expiration_date = datetime.fromtimestamp(struct.unpack('<Q', data)[0], tz=timezone.utc)
                continue

            element_cls = ElementRegistry.lookup(kind, type_code)
            if element_cls is None:
                if kind == UnifiedContainerKind.ADDRESS:
                    elements.append(UnknownElement(type_code, data))
                    continue
                return DecodeResult.failure(DecodeError.TYPE_MISMATCH,
                                            f"Unsupported item type code {type_code:#04x} in a unified {kind.value}.")

            if len(data) != element_cls.unified_data_length:
                return DecodeResult.failure(
                    DecodeError.UNEXPECTED_LENGTH,
                    f"Item {type_code:#04x} should be {element_cls.unified_data_length} bytes, not {len(data)}.")
            try:
                elements.append(element_cls.read_unified_data(data, network))
            except (ValueError, InvalidKeyError) as e:
                logger.debug("Rejected unified item", type_code=type_code, reason=str(e))
                return DecodeResult.failure(DecodeError.INVALID_KEY, f"Invalid item {type_code:#04x}: {e}")

        if not elements:
            return DecodeResult.failure(DecodeError.UNEXPECTED_LENGTH, "Unified encoding contains no items.")

        metadata = UnifiedEncodingMetadata(expiration_height, expiration_date)
        return DecodeResult.ok(DecodedUnifiedEncoding(kind, network, tuple(elements), metadata))

    @staticmethod
    def _padding(hrp: str) -> bytes:
        encoded_hrp = hrp.encode('utf-8')
        if len(encoded_hrp) > PADDING_LENGTH:
            raise ValueError(f"HRP longer than {PADDING_LENGTH} bytes: {hrp}")
        return encoded_hrp.ljust(PADDING_LENGTH, b'\x00')
