from .common import harden, is_hardened, parse_path, format_path, account_path, DerivationInfo
from . import transparent
from . import orchard
from . import sapling

__all__ = [
    'harden',
    'is_hardened',
    'parse_path',
    'format_path',
    'account_path',
    'DerivationInfo',
    'transparent',
    'orchard',
    'sapling'
]
