from .base import ZcashAddress
from .transparent import TransparentAddress, TransparentP2PKHAddress, TransparentP2SHAddress
from .tex import TexAddress
from .sprout import SproutAddress
from .sapling import SaplingAddress
from .unified import UnifiedAddress, OrchardAddress

__all__ = [
    'ZcashAddress',
    'TransparentAddress',
    'TransparentP2PKHAddress',
    'TransparentP2SHAddress',
    'TexAddress',
    'SproutAddress',
    'SaplingAddress',
    'UnifiedAddress',
    'OrchardAddress'
]
