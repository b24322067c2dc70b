# zcash_keys/addresses/base.py
from abc import ABC, abstractmethod
from typing import List, Optional, Type, TypeVar

from zcash_keys.core.zcash_types import Network, ParseError, ParseResult, Pool

R = TypeVar('R')

class ZcashAddress(ABC):
    """
    A textual Zcash address.

    Every address keeps the exact text it was parsed from (or rendered to),
    its network and the receiver(s) it pays to. Equality is by text.
    """

    def __init__(self, address: str, network: Network):
        self._address = address
        self._network = network

    @property
    def address(self) -> str:
        return self._address

    @property
    def network(self) -> Network:
        return self._network

    @property
    @abstractmethod
    def receivers(self) -> List:
        """Receivers this address pays to"""
        pass

    @property
    def has_shielded_receiver(self) -> bool:
        return any(getattr(r, 'pool', None) in (Pool.SPROUT, Pool.SAPLING, Pool.ORCHARD) for r in self.receivers)

    @property
    def unified_receiver(self):
        """Receiver this address contributes to a unified address, or None if it cannot be unified"""
        return None

    def supports_pool(self, pool: Pool) -> bool:
        return any(getattr(r, 'pool', None) == pool for r in self.receivers)

    def get_pool_receiver(self, receiver_type: Type[R]) -> Optional[R]:
        """The receiver of the given type, if this address has one"""
        for receiver in self.receivers:
            if isinstance(receiver, receiver_type):
                return receiver
        return None

    @staticmethod
    def try_parse(address: str) -> ParseResult:
        """Recognise the address kind from its prefix and decode it"""
        # Imported here: the concrete address modules import this one
        from zcash_keys.addresses.sapling import SaplingAddress
        from zcash_keys.addresses.sprout import SproutAddress
        from zcash_keys.addresses.tex import TexAddress
        from zcash_keys.addresses.transparent import TransparentAddress
        from zcash_keys.addresses.unified import UnifiedAddress

        if not isinstance(address, str) or not address:
            return ParseResult.failure(ParseError.UNRECOGNIZED_ADDRESS_TYPE, "Address is empty.")

        for address_cls in (UnifiedAddress, SaplingAddress, TexAddress, SproutAddress, TransparentAddress):
            if address_cls.looks_like(address):
                return address_cls.try_parse_text(address)

        return ParseResult.failure(ParseError.UNRECOGNIZED_ADDRESS_TYPE, "Unrecognized address format.")

    @staticmethod
    def parse(address: str) -> 'ZcashAddress':
        """Parse any supported address, raising InvalidAddressError"""
        return ZcashAddress.try_parse(address).unwrap()

    @classmethod
    def looks_like(cls, address: str) -> bool:
        return False

    @classmethod
    def try_parse_text(cls, address: str) -> ParseResult:
        raise NotImplementedError

    def __str__(self) -> str:
        return self._address

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._address!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, ZcashAddress):
            return NotImplemented
        return self._address == other._address

    def __hash__(self) -> int:
        return hash(self._address)

def has_bech32_prefix(address: str, *hrps: str) -> bool:
    lowered = address.lower()
    return any(lowered.startswith(hrp + '1') for hrp in hrps)
