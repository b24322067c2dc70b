# zcash_keys/core/account.py
import time
from dataclasses import dataclass
from functools import cached_property
from typing import Optional, Tuple, Union

from zcash_keys.addresses.base import ZcashAddress
from zcash_keys.addresses.unified import UnifiedAddress
from zcash_keys.core.config import KeyConfig
from zcash_keys.core.zcash_types import DecodeResult, Network
from zcash_keys.crypto.unified_encoding import container_for_hrp
from zcash_keys.keys import orchard as orchard_keys
from zcash_keys.keys import sapling as sapling_keys
from zcash_keys.keys.diversifier import DiversifierIndex
from zcash_keys.keys.receivers import OrchardReceiver, SaplingReceiver, TransparentP2PKHReceiver
from zcash_keys.keys.transparent import (
    TransparentFullViewingKey, TransparentIncomingViewingKey, TransparentSpendingKey
)
from zcash_keys.keys.unified_keys import (
    UnifiedFullViewingKey, UnifiedIncomingViewingKey, UnifiedViewingKey
)
from zcash_keys.utils.helpers import mnemonic_to_seed
from zcash_keys.utils.logging import get_logger, register_secret
from zcash_keys.zip32 import orchard as zip32_orchard
from zcash_keys.zip32 import sapling as zip32_sapling
from zcash_keys.zip32 import transparent as zip32_transparent

logger = get_logger(__name__)

@dataclass(frozen=True)
class SpendingKeys:
    """Account-level extended spending keys, one per pool"""
    transparent: Optional[TransparentSpendingKey] = None
    sapling: Optional[zip32_sapling.ExtendedSpendingKey] = None
    orchard: Optional[Union[zip32_orchard.ExtendedSpendingKey, orchard_keys.SpendingKey]] = None

    def __repr__(self) -> str:
        pools = [name for name in ('transparent', 'sapling', 'orchard') if getattr(self, name) is not None]
        return f"SpendingKeys(pools={pools})"

    @cached_property
    def full_viewing(self) -> 'FullViewingKeys':
        return FullViewingKeys(
            self.transparent.full_viewing_key if self.transparent else None,
            self.sapling.full_viewing_key if self.sapling else None,
            self.orchard.full_viewing_key if self.orchard else None,
        )

    @cached_property
    def internal_sapling(self) -> Optional[zip32_sapling.ExtendedSpendingKey]:
        """Sapling spending key for change outputs"""
        return self.sapling.derive_internal() if self.sapling else None

@dataclass(frozen=True)
class FullViewingKeys:
    transparent: Optional[TransparentFullViewingKey] = None
    sapling: Optional[sapling_keys.DiversifiableFullViewingKey] = None
    orchard: Optional[orchard_keys.FullViewingKey] = None

    @property
    def keys(self) -> list:
        return [k for k in (self.transparent, self.sapling, self.orchard) if k is not None]

    @cached_property
    def unified_key(self) -> UnifiedFullViewingKey:
        return UnifiedFullViewingKey.create(self.keys)

    @cached_property
    def internal_sapling(self) -> Optional[sapling_keys.DiversifiableFullViewingKey]:
        """Sapling key for change outputs"""
        return self.sapling.derive_internal() if self.sapling else None

    @cached_property
    def internal_orchard(self) -> Optional[orchard_keys.FullViewingKey]:
        """Orchard key for change outputs"""
        return self.orchard.derive_internal() if self.orchard else None

    @cached_property
    def incoming_viewing(self) -> 'IncomingViewingKeys':
        return IncomingViewingKeys(
            self.transparent.incoming_viewing_key if self.transparent else None,
            self.sapling.incoming_viewing_key if self.sapling else None,
            self.orchard.incoming_viewing_key if self.orchard else None,
        )

@dataclass(frozen=True)
class IncomingViewingKeys:
    transparent: Optional[TransparentIncomingViewingKey] = None
    sapling: Optional[sapling_keys.IncomingViewingKey] = None
    orchard: Optional[orchard_keys.IncomingViewingKey] = None

    @property
    def keys(self) -> list:
        return [k for k in (self.transparent, self.sapling, self.orchard) if k is not None]

    @cached_property
    def unified_key(self) -> UnifiedIncomingViewingKey:
        return UnifiedIncomingViewingKey.create(self.keys)

class ZcashAccount:
    """
    One account of an HD wallet: the spending, full viewing and incoming
    viewing keys of every pool, plus the address operations built on them.

    Accounts imported from a viewing key have no spending keys, and an
    incoming viewing key leaves ``full_viewing`` unset as well.
    """

    def __init__(self, incoming_viewing: IncomingViewingKeys,
                 full_viewing: Optional[FullViewingKeys] = None,
                 spending: Optional[SpendingKeys] = None,
                 gap_limit: int = KeyConfig.gap_limit):
        if not incoming_viewing.keys:
            raise ValueError("An account needs at least one viewing key.")
        self._incoming_viewing = incoming_viewing
        self._full_viewing = full_viewing
        self._spending = spending
        self._gap_limit = gap_limit

    @classmethod
    def from_seed(cls, seed: bytes, index: int = 0, network: Network = Network.MAINNET,
                  gap_limit: int = KeyConfig.gap_limit) -> 'ZcashAccount':
        """Derive all three pools' account keys at ``index`` from a BIP-39 seed"""
        register_secret(seed.hex())
        transparent = zip32_transparent.ExtendedSpendingKey.create_account(seed, index, network)
        spending = SpendingKeys(
            TransparentSpendingKey(transparent),
            zip32_sapling.ExtendedSpendingKey.create_account(seed, index, network),
            zip32_orchard.ExtendedSpendingKey.create_account(seed, index, network),
        )
        logger.debug("Derived account keys", account=index, network=network.value)
        full_viewing = spending.full_viewing
        return cls(full_viewing.incoming_viewing, full_viewing, spending, gap_limit)

    @classmethod
    def from_mnemonic(cls, mnemonic_phrase: str, passphrase: str = "", index: int = 0,
                      network: Network = Network.MAINNET) -> 'ZcashAccount':
        return cls.from_config(mnemonic_phrase, KeyConfig(network=network, account_index=index,
                                                          passphrase=passphrase))

    @classmethod
    def from_config(cls, mnemonic_phrase: str, config: KeyConfig) -> 'ZcashAccount':
        register_secret(mnemonic_phrase)
        seed = mnemonic_to_seed(mnemonic_phrase, config.passphrase, config.mnemonic_language)
        return cls.from_seed(seed, config.account_index, config.network, config.gap_limit)

    @classmethod
    def from_viewing_key(cls, viewing_key: UnifiedViewingKey,
                         gap_limit: int = KeyConfig.gap_limit) -> 'ZcashAccount':
        """Watch-only account; accepts a unified key object or its text"""
        if isinstance(viewing_key, str):
            viewing_key = UnifiedViewingKey.parse(viewing_key)
        if isinstance(viewing_key, UnifiedFullViewingKey):
            full_viewing = FullViewingKeys(
                viewing_key.get_viewing_key(TransparentFullViewingKey),
                viewing_key.get_viewing_key(sapling_keys.DiversifiableFullViewingKey),
                viewing_key.get_viewing_key(orchard_keys.FullViewingKey),
            )
            return cls(full_viewing.incoming_viewing, full_viewing, gap_limit=gap_limit)
        incoming_viewing = IncomingViewingKeys(
            viewing_key.get_viewing_key(TransparentIncomingViewingKey),
            viewing_key.get_viewing_key(sapling_keys.IncomingViewingKey),
            viewing_key.get_viewing_key(orchard_keys.IncomingViewingKey),
        )
        return cls(incoming_viewing, gap_limit=gap_limit)

    @classmethod
    def try_import(cls, encoded_key: str, gap_limit: int = KeyConfig.gap_limit) -> Optional['ZcashAccount']:
        """
        Account built from the text of a single key, or None when the text is
        not a key this library can decode.

        Spending keys (Orchard, Sapling extended, BIP-32 xprv) give a spending
        account; Sapling extended full viewing keys, xpubs and unified viewing
        keys give a watch-only account.
        """
        result = _try_decode_key(encoded_key.strip())
        if not result.success:
            logger.debug("Text is not an importable key", error=result.error.value)
            return None
        key = result.value

        if isinstance(key, UnifiedViewingKey):
            return cls.from_viewing_key(key, gap_limit)
        if isinstance(key, zip32_transparent.ExtendedSpendingKey):
            spending = SpendingKeys(transparent=TransparentSpendingKey(key))
        elif isinstance(key, zip32_sapling.ExtendedSpendingKey):
            spending = SpendingKeys(sapling=key)
        elif isinstance(key, orchard_keys.SpendingKey):
            spending = SpendingKeys(orchard=key)
        else:
            if isinstance(key, zip32_transparent.ExtendedViewingKey):
                full_viewing = FullViewingKeys(transparent=TransparentFullViewingKey(key))
            else:
                full_viewing = FullViewingKeys(sapling=key.key)
            return cls(full_viewing.incoming_viewing, full_viewing, gap_limit=gap_limit)

        register_secret(encoded_key.strip())
        full_viewing = spending.full_viewing
        return cls(full_viewing.incoming_viewing, full_viewing, spending, gap_limit)

    @property
    def spending(self) -> Optional[SpendingKeys]:
        return self._spending

    @property
    def full_viewing(self) -> Optional[FullViewingKeys]:
        return self._full_viewing

    @property
    def incoming_viewing(self) -> IncomingViewingKeys:
        return self._incoming_viewing

    @property
    def network(self) -> Network:
        return self._incoming_viewing.keys[0].network

    @property
    def gap_limit(self) -> int:
        return self._gap_limit

    @property
    def has_diversifiable_keys(self) -> bool:
        return self._incoming_viewing.sapling is not None or self._incoming_viewing.orchard is not None

    @cached_property
    def default_address(self) -> UnifiedAddress:
        return self._incoming_viewing.unified_key.default_address

    def get_diversified_address(self, diversifier_index=None) -> Tuple[DiversifierIndex, UnifiedAddress]:
        """
        Shielded-only unified address at the first index at or after
        ``diversifier_index`` that Sapling accepts.

        Transparent receivers are left out because they cannot be diversified
        without being linkable. Without an index a time-based one is used.
        """
        if not self.has_diversifiable_keys:
            raise ValueError("This account doesn't include any diversifiable keys.")
        if diversifier_index is None:
            diversifier_index = time.time_ns() // 100
        index = DiversifierIndex.of(diversifier_index)

        receivers = []
        if self._incoming_viewing.sapling is not None:
            index, receiver = self._incoming_viewing.sapling.find_receiver(index)
            receivers.append(receiver)
        if self._incoming_viewing.orchard is not None:
            receivers.append(self._incoming_viewing.orchard.create_receiver(index))
        return index, UnifiedAddress.create(receivers, self.network)

    def address_sends_to_this_account(self, address) -> bool:
        """
        True only when every receiver in ``address`` belongs to this account.

        A unified address mixing our receivers with someone else's is
        rejected so it cannot be reused to divert funds.
        """
        if isinstance(address, str):
            address = ZcashAddress.parse(address)
        if address.network != self.network:
            return False
        receivers = address.receivers
        return bool(receivers) and all(self._owns_receiver(r) for r in receivers)

    def _owns_receiver(self, receiver) -> bool:
        keys = self._incoming_viewing
        if isinstance(receiver, OrchardReceiver):
            return keys.orchard is not None and keys.orchard.check_receiver(receiver)
        if isinstance(receiver, SaplingReceiver):
            return keys.sapling is not None and keys.sapling.check_receiver(receiver)
        if isinstance(receiver, TransparentP2PKHReceiver):
            return keys.transparent is not None and keys.transparent.check_receiver(receiver, self._gap_limit)
        return False

    def __repr__(self) -> str:
        return f"ZcashAccount(network={self.network.value}, watch_only={self._spending is None})"

def _try_decode_key(encoded: str) -> DecodeResult:
    """Pick the decoder from the Bech32 prefix; anything else is tried as a BIP-32 key"""
    hrp = encoded.rpartition('1')[0]
    if hrp in (orchard_keys.SpendingKey.MAINNET_HRP, orchard_keys.SpendingKey.TESTNET_HRP):
        return orchard_keys.SpendingKey.try_from_encoded(encoded)
    if hrp in (zip32_sapling.ExtendedSpendingKey.MAINNET_HRP, zip32_sapling.ExtendedSpendingKey.TESTNET_HRP):
        return zip32_sapling.ExtendedSpendingKey.try_from_encoded(encoded)
    if hrp in (zip32_sapling.ExtendedFullViewingKey.MAINNET_HRP, zip32_sapling.ExtendedFullViewingKey.TESTNET_HRP):
        return zip32_sapling.ExtendedFullViewingKey.try_from_encoded(encoded)
    if container_for_hrp(hrp) is not None:
        return UnifiedViewingKey.try_parse(encoded)
    return zip32_transparent.try_decode_extended_key(encoded)
