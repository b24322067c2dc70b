# zcash_keys/keys/elements.py
from enum import Enum, IntEnum
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Type, runtime_checkable

class UnifiedTypeCode(IntEnum):
    """Type codes of items inside unified addresses and viewing keys"""
    P2PKH = 0x00
    P2SH = 0x01
    SAPLING = 0x02
    ORCHARD = 0x03
    EXPIRATION_BY_HEIGHT = 0xE0
    EXPIRATION_BY_UNIX_TIME = 0xE1

METADATA_TYPE_CODES = frozenset({UnifiedTypeCode.EXPIRATION_BY_HEIGHT, UnifiedTypeCode.EXPIRATION_BY_UNIX_TIME})

class UnifiedContainerKind(Enum):
    """What a unified encoding carries"""
    ADDRESS = "address"
    FULL_VIEWING_KEY = "full_viewing_key"
    INCOMING_VIEWING_KEY = "incoming_viewing_key"

@runtime_checkable
class UnifiedEncodingElement(Protocol):
    """
    Capability shared by everything that can sit inside a unified encoding.

    ``read_unified_data(data, network)`` is a classmethod on implementers that
    rebuilds the element from exactly ``unified_data_length`` bytes.
    """

    unified_type_code: int
    unified_data_length: int

    def write_unified_data(self, buffer: bytearray) -> int:
        """Append the element's bytes to ``buffer`` and return how many were written"""
        ...

@dataclass(frozen=True)
class UnknownElement:
    """An item with a type code this library does not interpret, kept verbatim"""
    type_code: int
    data: bytes

    def __post_init__(self):
        if not 0 <= self.type_code <= 0xff:
            raise ValueError(f"Type code out of range: {self.type_code}")

    @property
    def unified_type_code(self) -> int:
        return self.type_code

    @property
    def unified_data_length(self) -> int:
        return len(self.data)

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(self.data)
        return len(self.data)

class ElementRegistry:
    """Type code -> element class, kept separately for each container kind"""

    _readers: Dict[UnifiedContainerKind, Dict[int, Type]] = {kind: {} for kind in UnifiedContainerKind}

    @classmethod
    def register(cls, kind: UnifiedContainerKind, element_cls: Type) -> Type:
        type_code = element_cls.unified_type_code
        existing = cls._readers[kind].get(type_code)
        if existing is not None and existing is not element_cls:
            raise ValueError(f"Type code {type_code:#04x} already registered for {kind.value} by {existing.__name__}")
        cls._readers[kind][type_code] = element_cls
        return element_cls

    @classmethod
    def lookup(cls, kind: UnifiedContainerKind, type_code: int) -> Optional[Type]:
        return cls._readers[kind].get(type_code)

