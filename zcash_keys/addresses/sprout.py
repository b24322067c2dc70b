# zcash_keys/addresses/sprout.py
from typing import List, Optional

from zcash_keys.addresses.base import ZcashAddress
from zcash_keys.core.zcash_types import Network, ParseError, ParseResult
from zcash_keys.crypto.base58check import Base58Check
from zcash_keys.keys.receivers import SproutReceiver

VERSIONS = {Network.MAINNET: b'\x16\x9a', Network.TESTNET: b'\x16\xb6'}
DECODED_LENGTH = 66

class SproutAddress(ZcashAddress):
    """Legacy Sprout address; read-only, it cannot be part of a unified address"""

    def __init__(self, receiver: SproutReceiver, network: Network = Network.MAINNET, address: Optional[str] = None):
        if not isinstance(receiver, SproutReceiver):
            raise TypeError("SproutAddress needs a SproutReceiver")
        if address is None:
            address = Base58Check.encode(VERSIONS[network] + receiver.data)
        super().__init__(address, network)
        self._receiver = receiver

    @property
    def receiver(self) -> SproutReceiver:
        return self._receiver

    @property
    def receivers(self) -> List:
        return [self._receiver]

    @classmethod
    def looks_like(cls, address: str) -> bool:
        return address[:2] in ('zc', 'zt')

    @classmethod
    def try_parse_text(cls, address: str) -> ParseResult:
        decoded = Base58Check.try_decode(address, max_data_length=DECODED_LENGTH)
        if not decoded.success:
            return ParseResult.from_decode_failure(decoded)
        data = decoded.value
        if len(data) != DECODED_LENGTH:
            return ParseResult.failure(ParseError.INVALID_ADDRESS,
                                       f"Sprout addresses decode to {DECODED_LENGTH} bytes, not {len(data)}.")
        for network, version in VERSIONS.items():
            if data[:2] == version:
                return ParseResult.ok(cls(SproutReceiver(data[2:]), network, address))
        return ParseResult.failure(ParseError.INVALID_ADDRESS, "Unrecognized network header.")
