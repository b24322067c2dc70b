from .exceptions import (
    ZcashError, FormatError, InvalidKeyError, BackendUnavailableError,
    InvalidAddressError, UnsupportedDerivationError, MemoError
)
from .zcash_types import Network, Pool, DecodeError, ParseError, DecodeResult, ParseResult
from .config import KeyConfig
from .memo import Memo, MemoFormat

__all__ = [
    'ZcashError',
    'FormatError',
    'InvalidKeyError',
    'BackendUnavailableError',
    'InvalidAddressError',
    'UnsupportedDerivationError',
    'MemoError',
    'Network',
    'Pool',
    'DecodeError',
    'ParseError',
    'DecodeResult',
    'ParseResult',
    'KeyConfig',
    'Memo',
    'MemoFormat'
]
