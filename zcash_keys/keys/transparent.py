# zcash_keys/keys/transparent.py
from dataclasses import dataclass
from functools import cached_property
from typing import Optional

from zcash_keys.core.zcash_types import Network, Pool
from zcash_keys.keys.diversifier import DiversifierIndex
from zcash_keys.keys.elements import ElementRegistry, UnifiedContainerKind, UnifiedTypeCode
from zcash_keys.keys.receivers import TransparentP2PKHReceiver
from zcash_keys.zip32.common import DerivationInfo, HARDENED_BIT
from zcash_keys.zip32.transparent import ExtendedSpendingKey, ExtendedViewingKey, hash160
from zcash_keys.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SCAN_LIMIT = 20
EXTERNAL_CHAIN = 0
INTERNAL_CHAIN = 1

def _receiver_index(diversifier_index) -> int:
    index = DiversifierIndex.of(diversifier_index).value
    if index >= HARDENED_BIT:
        raise ValueError(f"Transparent receivers need a non-hardened index, got {index}")
    return index

def _element_bytes(key: ExtendedViewingKey) -> bytes:
    return key.chain_code + key.public_key

def _element_key(data: bytes, network: Network) -> ExtendedViewingKey:
    if len(data) != 65:
        raise ValueError(f"Transparent viewing key must be 65 bytes, got {len(data)}")
    return ExtendedViewingKey(data[32:], DerivationInfo(data[:32]), network)

@dataclass(frozen=True)
class TransparentIncomingViewingKey:
    """Extended public key of the external chain, whose children are the account's receivers"""
    extended_key: ExtendedViewingKey

    pool = Pool.TRANSPARENT
    unified_type_code = UnifiedTypeCode.P2PKH
    unified_data_length = 65

    @property
    def network(self) -> Network:
        return self.extended_key.network

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(_element_bytes(self.extended_key))
        return self.unified_data_length

    @classmethod
    def read_unified_data(cls, data: bytes, network: Network) -> 'TransparentIncomingViewingKey':
        return cls(_element_key(data, network))

    def create_receiver(self, diversifier_index=0) -> TransparentP2PKHReceiver:
        """P2PKH receiver of the non-hardened child at ``diversifier_index``"""
        child = self.extended_key.derive(_receiver_index(diversifier_index))
        return TransparentP2PKHReceiver(hash160(child.public_key))

    def create_default_receiver(self) -> TransparentP2PKHReceiver:
        return self.create_receiver(0)

    def try_get_diversifier_index(self, receiver: TransparentP2PKHReceiver,
                                  scan_limit: int = DEFAULT_SCAN_LIMIT) -> Optional[DiversifierIndex]:
        """
        Transparent keys have no diversifier key, so the first ``scan_limit``
        children are compared instead.
        """
        for index in range(scan_limit):
            if self.create_receiver(index) == receiver:
                return DiversifierIndex(index)
        logger.debug("Transparent receiver not found within scan limit", scan_limit=scan_limit)
        return None

    def check_receiver(self, receiver: TransparentP2PKHReceiver, scan_limit: int = DEFAULT_SCAN_LIMIT) -> bool:
        return self.try_get_diversifier_index(receiver, scan_limit) is not None

@dataclass(frozen=True)
class TransparentFullViewingKey:
    """Account-level extended public key (m/44'/coin_type'/account')"""
    extended_key: ExtendedViewingKey

    pool = Pool.TRANSPARENT
    unified_type_code = UnifiedTypeCode.P2PKH
    unified_data_length = 65

    @property
    def network(self) -> Network:
        return self.extended_key.network

    def write_unified_data(self, buffer: bytearray) -> int:
        buffer.extend(_element_bytes(self.extended_key))
        return self.unified_data_length

    @classmethod
    def read_unified_data(cls, data: bytes, network: Network) -> 'TransparentFullViewingKey':
        return cls(_element_key(data, network))

    @cached_property
    def incoming_viewing_key(self) -> TransparentIncomingViewingKey:
        return TransparentIncomingViewingKey(self.extended_key.derive(EXTERNAL_CHAIN))

    @cached_property
    def internal_incoming_viewing_key(self) -> TransparentIncomingViewingKey:
        """Change chain"""
        return TransparentIncomingViewingKey(self.extended_key.derive(INTERNAL_CHAIN))

    def create_receiver(self, diversifier_index=0) -> TransparentP2PKHReceiver:
        return self.incoming_viewing_key.create_receiver(diversifier_index)

    def create_default_receiver(self) -> TransparentP2PKHReceiver:
        return self.incoming_viewing_key.create_default_receiver()

    def try_get_diversifier_index(self, receiver: TransparentP2PKHReceiver,
                                  scan_limit: int = DEFAULT_SCAN_LIMIT) -> Optional[DiversifierIndex]:
        return self.incoming_viewing_key.try_get_diversifier_index(receiver, scan_limit)

    def check_receiver(self, receiver: TransparentP2PKHReceiver, scan_limit: int = DEFAULT_SCAN_LIMIT) -> bool:
        return self.incoming_viewing_key.check_receiver(receiver, scan_limit)

@dataclass(frozen=True)
class TransparentSpendingKey:
    """Account-level extended private key"""
    extended_key: ExtendedSpendingKey

    pool = Pool.TRANSPARENT

    @property
    def network(self) -> Network:
        return self.extended_key.network

    @cached_property
    def full_viewing_key(self) -> TransparentFullViewingKey:
        return TransparentFullViewingKey(self.extended_key.extended_viewing_key)

    @property
    def incoming_viewing_key(self) -> TransparentIncomingViewingKey:
        return self.full_viewing_key.incoming_viewing_key

    def receiver_private_key(self, diversifier_index=0, internal: bool = False) -> bytes:
        """Private key behind the receiver at ``diversifier_index``"""
        chain = INTERNAL_CHAIN if internal else EXTERNAL_CHAIN
        return self.extended_key.derive(chain).derive(_receiver_index(diversifier_index)).private_key

ElementRegistry.register(UnifiedContainerKind.FULL_VIEWING_KEY, TransparentFullViewingKey)
ElementRegistry.register(UnifiedContainerKind.INCOMING_VIEWING_KEY, TransparentIncomingViewingKey)
