# zcash_keys/core/zcash_types.py
from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional

from zcash_keys.core.exceptions import FormatError, InvalidAddressError

class Network(Enum):
    """Zcash networks"""
    MAINNET = "mainnet"
    TESTNET = "testnet"

    @property
    def coin_type(self) -> int:
        """SLIP-44 coin type used in account derivation paths"""
        return 133 if self is Network.MAINNET else 1

    @property
    def is_testnet(self) -> bool:
        return self is Network.TESTNET

class Pool(Enum):
    """Value pools coexisting in the currency"""
    TRANSPARENT = auto()
    SPROUT = auto()
    SAPLING = auto()
    ORCHARD = auto()

class DecodeError(Enum):
    """Reasons an encoded string or buffer failed to decode"""
    INVALID_CHARACTER = "invalid_character"
    INVALID_CHECKSUM = "invalid_checksum"
    BUFFER_TOO_SMALL = "buffer_too_small"
    NO_SEPARATOR = "no_separator"
    BAD_PADDING = "bad_padding"
    UNEXPECTED_LENGTH = "unexpected_length"
    UNRECOGNIZED_HRP = "unrecognized_hrp"
    UNRECOGNIZED_VERSION = "unrecognized_version"
    INVALID_KEY = "invalid_key"
    INVALID_DERIVATION_DATA = "invalid_derivation_data"
    TYPE_MISMATCH = "type_mismatch"

class ParseError(Enum):
    """Reasons an address failed to parse"""
    UNRECOGNIZED_ADDRESS_TYPE = "unrecognized_address_type"
    INVALID_ADDRESS = "invalid_address"

@dataclass(frozen=True)
class DecodeResult:
    """Outcome of a soft decode: either a value or an error code with message"""
    value: Any = None
    error: Optional[DecodeError] = None
    message: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, value: Any) -> 'DecodeResult':
        return cls(value=value)

    @classmethod
    def failure(cls, error: DecodeError, message: str) -> 'DecodeResult':
        return cls(error=error, message=message)

    def unwrap(self) -> Any:
        """Return the value or raise FormatError carrying the error code"""
        if self.error is not None:
            raise FormatError(self.message or self.error.value, self.error)
        return self.value

    def __bool__(self) -> bool:
        return self.success

@dataclass(frozen=True)
class ParseResult:
    """Outcome of a soft address parse"""
    value: Any = None
    error: Optional[ParseError] = None
    message: Optional[str] = None
    decode_error: Optional[DecodeError] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @classmethod
    def ok(cls, value: Any) -> 'ParseResult':
        return cls(value=value)

    @classmethod
    def failure(cls, error: ParseError, message: str, decode_error: Optional[DecodeError] = None) -> 'ParseResult':
        return cls(error=error, message=message, decode_error=decode_error)

    @classmethod
    def from_decode_failure(cls, result: DecodeResult) -> 'ParseResult':
        """An address that looked right but failed to decode"""
        return cls(error=ParseError.INVALID_ADDRESS, message=result.message, decode_error=result.error)

    def unwrap(self) -> Any:
        if self.error is not None:
            raise InvalidAddressError(self.message or self.error.value, self.error, self.decode_error)
        return self.value

    def __bool__(self) -> bool:
        return self.success
