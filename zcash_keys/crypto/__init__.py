# unified_encoding depends on keys.elements and is exported from the top-level package
from .bech32 import Bech32, Bech32m
from .base58check import Base58Check
from .blake2 import blake2b, prf_expand
from .f4jumble import f4jumble, f4jumble_inv

__all__ = [
    'Bech32',
    'Bech32m',
    'Base58Check',
    'blake2b',
    'prf_expand',
    'f4jumble',
    'f4jumble_inv'
]
