# zcash_keys/addresses/sapling.py
from typing import List, Optional

from zcash_keys.addresses.base import ZcashAddress, has_bech32_prefix
from zcash_keys.core.zcash_types import DecodeError, Network, ParseError, ParseResult
from zcash_keys.crypto.bech32 import Bech32
from zcash_keys.keys.receivers import SaplingReceiver

HRPS = {Network.MAINNET: "zs", Network.TESTNET: "ztestsapling"}

class SaplingAddress(ZcashAddress):
    """Bech32 Sapling address"""

    def __init__(self, receiver: SaplingReceiver, network: Network = Network.MAINNET, address: Optional[str] = None):
        if not isinstance(receiver, SaplingReceiver):
            raise TypeError("SaplingAddress needs a SaplingReceiver")
        if address is None:
            address = Bech32.encode(HRPS[network], receiver.data)
        super().__init__(address, network)
        self._receiver = receiver

    @property
    def receiver(self) -> SaplingReceiver:
        return self._receiver

    @property
    def receivers(self) -> List:
        return [self._receiver]

    @property
    def unified_receiver(self) -> SaplingReceiver:
        return self._receiver

    @classmethod
    def looks_like(cls, address: str) -> bool:
        return has_bech32_prefix(address, *HRPS.values())

    @classmethod
    def try_parse_text(cls, address: str) -> ParseResult:
        decoded = Bech32.try_decode(address)
        if not decoded.success:
            return ParseResult.from_decode_failure(decoded)
        hrp, data = decoded.value
        networks = {hrp_: network for network, hrp_ in HRPS.items()}
        if hrp not in networks:
            return ParseResult.failure(ParseError.INVALID_ADDRESS, f"Unexpected bech32 tag: {hrp}",
                                       DecodeError.UNRECOGNIZED_HRP)
        if len(data) != SaplingReceiver.unified_data_length:
            return ParseResult.failure(ParseError.INVALID_ADDRESS,
                                       f"Sapling addresses carry 43 bytes, not {len(data)}.",
                                       DecodeError.UNEXPECTED_LENGTH)
        return ParseResult.ok(cls(SaplingReceiver(data), networks[hrp], address))
