from zcash_keys.core import (
    ZcashError, FormatError, InvalidKeyError, BackendUnavailableError, InvalidAddressError,
    UnsupportedDerivationError, MemoError, Network, Pool, DecodeError, ParseError,
    DecodeResult, ParseResult, KeyConfig, Memo, MemoFormat
)
from zcash_keys.utils import setup_logging, get_logger, generate_mnemonic, validate_mnemonic, mnemonic_to_seed
from zcash_keys.interfaces import CryptoBackend, set_backend
from zcash_keys.crypto import Bech32, Bech32m, Base58Check
from zcash_keys.keys import DiversifierIndex, UnifiedTypeCode, UnifiedContainerKind
from zcash_keys.crypto.unified_encoding import UnifiedEncoding, UnifiedEncodingMetadata
from zcash_keys.addresses import (
    ZcashAddress, TransparentP2PKHAddress, TransparentP2SHAddress, TexAddress,
    SproutAddress, SaplingAddress, UnifiedAddress, OrchardAddress
)
from zcash_keys.keys.unified_keys import UnifiedViewingKey, UnifiedFullViewingKey, UnifiedIncomingViewingKey
from zcash_keys.core.account import ZcashAccount

__version__ = "1.0.0"
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
    'MemoFormat',
    'setup_logging',
    'get_logger',
    'generate_mnemonic',
    'validate_mnemonic',
    'mnemonic_to_seed',
    'CryptoBackend',
    'set_backend',
    'Bech32',
    'Bech32m',
    'Base58Check',
    'DiversifierIndex',
    'UnifiedTypeCode',
    'UnifiedContainerKind',
    'UnifiedEncoding',
    'UnifiedEncodingMetadata',
    'ZcashAddress',
    'TransparentP2PKHAddress',
    'TransparentP2SHAddress',
    'TexAddress',
    'SproutAddress',
    'SaplingAddress',
    'UnifiedAddress',
    'OrchardAddress',
    'UnifiedViewingKey',
    'UnifiedFullViewingKey',
    'UnifiedIncomingViewingKey',
    'ZcashAccount'
]
