# zcash_keys/zip32/orchard.py
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Union

from zcash_keys.core.zcash_types import Network
from zcash_keys.crypto.blake2 import PrfExpandCode, blake2b, le32, prf_expand
from zcash_keys.keys.orchard import FullViewingKey, IncomingViewingKey, SpendingKey
from zcash_keys.zip32.common import (
    DerivationInfo, SHIELDED_PURPOSE, account_path, parse_path, require_hardened, split_i
)
from zcash_keys.utils.logging import get_logger

logger = get_logger(__name__)

MASTER_PERSONALIZATION = b"ZcashIP32Orchard"

@dataclass(frozen=True)
class ExtendedSpendingKey:
    """Orchard ZIP-32 node: a spending key plus its derivation bookkeeping"""
    spending_key: SpendingKey
    derivation: DerivationInfo

    def __repr__(self) -> str:
        return (f"ExtendedSpendingKey(pool=orchard, depth={self.depth}, "
                f"child_index={self.child_index}, network={self.network.value})")

    @classmethod
    def create(cls, seed: bytes, network: Network = Network.MAINNET) -> 'ExtendedSpendingKey':
        """Master key from a seed of 32 to 252 bytes"""
        if not 32 <= len(seed) <= 252:
            raise ValueError(f"Seed must be 32 to 252 bytes, got {len(seed)}")
        sk, chain_code = split_i(blake2b(seed, MASTER_PERSONALIZATION))
        return cls(SpendingKey(sk, network), DerivationInfo(chain_code))

    @classmethod
    def create_account(cls, seed: bytes, account: int = 0,
                       network: Network = Network.MAINNET) -> 'ExtendedSpendingKey':
        """``m/32'/coin_type'/account'``"""
        return cls.create(seed, network).derive_path(account_path(SHIELDED_PURPOSE, network, account))

    @property
    def network(self) -> Network:
        return self.spending_key.network

    @property
    def chain_code(self) -> bytes:
        return self.derivation.chain_code

    @property
    def depth(self) -> int:
        return self.derivation.depth

    @property
    def child_index(self) -> int:
        return self.derivation.child_index

    @property
    def parent_full_viewing_key_tag(self) -> bytes:
        return self.derivation.parent_fingerprint_tag

    @property
    def full_viewing_key(self) -> FullViewingKey:
        return self.spending_key.full_viewing_key

    @property
    def incoming_viewing_key(self) -> IncomingViewingKey:
        return self.spending_key.incoming_viewing_key

    @cached_property
    def fingerprint(self) -> bytes:
        return self.full_viewing_key.fingerprint

    def derive(self, child_index: int) -> 'ExtendedSpendingKey':
        """Hardened child key"""
        child_index = require_hardened(child_index, "Orchard")
        i = prf_expand(self.chain_code, PrfExpandCode.ORCHARD_ZIP32_CHILD,
                       self.spending_key.sk, le32(child_index))
        sk, chain_code = split_i(i)
        logger.debug("Derived Orchard child key", depth=self.depth + 1, child_index=child_index)
        return ExtendedSpendingKey(SpendingKey(sk, self.network),
                                   self.derivation.child(chain_code, self.fingerprint, child_index))

    def derive_path(self, path: Union[str, Iterable[int]]) -> 'ExtendedSpendingKey':
        key = self
        for index in parse_path(path):
            key = key.derive(index)
        return key
