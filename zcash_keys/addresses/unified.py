# zcash_keys/addresses/unified.py
from datetime import datetime
from typing import Iterable, List, Optional

from zcash_keys.addresses.base import ZcashAddress, has_bech32_prefix
from zcash_keys.core.zcash_types import DecodeError, Network, ParseError, ParseResult, Pool
from zcash_keys.crypto.unified_encoding import (
    UnifiedEncoding, UnifiedEncodingMetadata, human_readable_part
)
from zcash_keys.keys.elements import METADATA_TYPE_CODES, UnifiedContainerKind, UnifiedTypeCode
from zcash_keys.keys.receivers import OrchardReceiver

HRPS = (human_readable_part(UnifiedContainerKind.ADDRESS, Network.MAINNET),
        human_readable_part(UnifiedContainerKind.ADDRESS, Network.TESTNET))

def _is_shielded(receiver) -> bool:
    type_code = receiver.unified_type_code
    return type_code > UnifiedTypeCode.P2SH and type_code not in METADATA_TYPE_CODES

class UnifiedAddress(ZcashAddress):
    """ZIP-316 unified address combining one receiver per pool"""

    def __init__(self, address: str, receivers: Iterable, network: Network,
                 metadata: Optional[UnifiedEncodingMetadata] = None):
        super().__init__(address, network)
        self._receivers = tuple(receivers)
        self._metadata = metadata or UnifiedEncodingMetadata()

    @classmethod
    def create(cls, receivers: Iterable, network: Optional[Network] = None,
               metadata: Optional[UnifiedEncodingMetadata] = None) -> 'UnifiedAddress':
        """
        Build a unified address from receivers or single-receiver addresses.

        ``network`` defaults to that of the given addresses, or mainnet for
        bare receivers. At least one shielded receiver is required.
        """
        elements = []
        for item in receivers:
            if isinstance(item, ZcashAddress):
                receiver = item.unified_receiver
                if receiver is None:
                    raise ValueError(f"{type(item).__name__} cannot be part of a unified address.")
                if network is None:
                    network = item.network
                elif item.network != network:
                    raise ValueError("All addresses in a unified address must share one network.")
                elements.append(receiver)
            else:
                elements.append(item)

        if not elements:
            raise ValueError("At least one receiver is required.")
        if not any(_is_shielded(r) for r in elements):
            raise ValueError("At least one shielded receiver is required.")

        network = network or Network.MAINNET
        encoded = UnifiedEncoding.encode(
            human_readable_part(UnifiedContainerKind.ADDRESS, network), elements, metadata)
        ordered = sorted(elements, key=lambda r: r.unified_type_code)
        return cls._construct(encoded, ordered, network, metadata)

    @classmethod
    def _construct(cls, address: str, receivers: List, network: Network,
                   metadata: Optional[UnifiedEncodingMetadata]) -> 'UnifiedAddress':
        if len(receivers) == 1 and isinstance(receivers[0], OrchardReceiver):
            return OrchardAddress(receivers[0], network, metadata, address)
        return UnifiedAddress(address, receivers, network, metadata)

    @property
    def receivers(self) -> List:
        """Receivers in type code order, unrecognised ones included"""
        return list(self._receivers)

    @property
    def metadata(self) -> UnifiedEncodingMetadata:
        return self._metadata

    @property
    def expiration_height(self) -> Optional[int]:
        return self._metadata.expiration_height

    @property
    def expiration_date(self) -> Optional[datetime]:
        return self._metadata.expiration_date

    @property
    def has_shielded_receiver(self) -> bool:
        return any(_is_shielded(r) for r in self._receivers)

    def supports_pool(self, pool: Pool) -> bool:
        return any(getattr(r, 'pool', None) == pool for r in self._receivers)

    @classmethod
    def looks_like(cls, address: str) -> bool:
        return has_bech32_prefix(address, *HRPS)

    @classmethod
    def try_parse_text(cls, address: str) -> ParseResult:
        decoded = UnifiedEncoding.try_decode(address)
        if not decoded.success:
            return ParseResult.from_decode_failure(decoded)
        contents = decoded.value
        if contents.kind != UnifiedContainerKind.ADDRESS:
            return ParseResult.failure(ParseError.INVALID_ADDRESS,
                                       f"Expected a unified address but found a unified {contents.kind.value}.",
                                       DecodeError.TYPE_MISMATCH)
        if not any(_is_shielded(r) for r in contents.elements):
            return ParseResult.failure(ParseError.INVALID_ADDRESS,
                                       "Unified addresses must contain at least one shielded receiver.")
        return ParseResult.ok(cls._construct(address, list(contents.elements), contents.network, contents.metadata))

class OrchardAddress(UnifiedAddress):
    """Unified address carrying only an Orchard receiver"""

    def __init__(self, receiver: OrchardReceiver, network: Network = Network.MAINNET,
                 metadata: Optional[UnifiedEncodingMetadata] = None, address: Optional[str] = None):
        if not isinstance(receiver, OrchardReceiver):
            raise TypeError("OrchardAddress needs an OrchardReceiver")
        if address is None:
            address = UnifiedEncoding.encode(
                human_readable_part(UnifiedContainerKind.ADDRESS, network), [receiver], metadata)
        super().__init__(address, [receiver], network, metadata)

    @property
    def receiver(self) -> OrchardReceiver:
        return self._receivers[0]

    @property
    def unified_receiver(self) -> OrchardReceiver:
        return self._receivers[0]
