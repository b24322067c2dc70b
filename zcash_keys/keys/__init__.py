# Importing the pool modules registers their unified elements.
# unified_keys needs addresses and is exported from the top-level package.
from .elements import UnifiedTypeCode, UnifiedContainerKind, UnknownElement, ElementRegistry
from .diversifier import DiversifierIndex
from .receivers import (
    TransparentP2PKHReceiver, TransparentP2SHReceiver, SaplingReceiver, OrchardReceiver, SproutReceiver
)
from . import orchard
from . import sapling
from .transparent import TransparentSpendingKey, TransparentFullViewingKey, TransparentIncomingViewingKey

__all__ = [
    'UnifiedTypeCode',
    'UnifiedContainerKind',
    'UnknownElement',
    'ElementRegistry',
    'DiversifierIndex',
    'TransparentP2PKHReceiver',
    'TransparentP2SHReceiver',
    'SaplingReceiver',
    'OrchardReceiver',
    'SproutReceiver',
    'orchard',
    'sapling',
    'TransparentSpendingKey',
    'TransparentFullViewingKey',
    'TransparentIncomingViewingKey'
]
