# zcash_keys/addresses/tex.py
from typing import List, Optional

from zcash_keys.addresses.base import ZcashAddress, has_bech32_prefix
from zcash_keys.addresses.transparent import TransparentP2PKHAddress
from zcash_keys.core.zcash_types import DecodeError, Network, ParseError, ParseResult
from zcash_keys.crypto.bech32 import Bech32m
from zcash_keys.keys.receivers import TransparentP2PKHReceiver

HRPS = {Network.MAINNET: "tex", Network.TESTNET: "textest"}

class TexAddress(ZcashAddress):
    """Transparent-source-only address (ZIP-320): a P2PKH hash rendered as Bech32m"""

    def __init__(self, receiver: TransparentP2PKHReceiver, network: Network = Network.MAINNET,
                 address: Optional[str] = None):
        if not isinstance(receiver, TransparentP2PKHReceiver):
            raise TypeError("TexAddress needs a TransparentP2PKHReceiver")
        if address is None:
            address = Bech32m.encode(HRPS[network], receiver.data)
        super().__init__(address, network)
        self._receiver = receiver

    @classmethod
    def from_transparent(cls, address: TransparentP2PKHAddress) -> 'TexAddress':
        return cls(address.receiver, address.network)

    @property
    def receiver(self) -> TransparentP2PKHReceiver:
        return self._receiver

    @property
    def receivers(self) -> List:
        return [self._receiver]

    @classmethod
    def looks_like(cls, address: str) -> bool:
        return has_bech32_prefix(address, *HRPS.values())

    @classmethod
    def try_parse_text(cls, address: str) -> ParseResult:
        decoded = Bech32m.try_decode(address)
        if not decoded.success:
            return ParseResult.from_decode_failure(decoded)
        hrp, data = decoded.value
        networks = {hrp_: network for network, hrp_ in HRPS.items()}
        if hrp not in networks:
            return ParseResult.failure(ParseError.INVALID_ADDRESS, f"Unexpected bech32 tag: {hrp}",
                                       DecodeError.UNRECOGNIZED_HRP)
        if len(data) != TransparentP2PKHReceiver.unified_data_length:
            return ParseResult.failure(ParseError.INVALID_ADDRESS, f"TEX addresses carry 20 bytes, not {len(data)}.",
                                       DecodeError.UNEXPECTED_LENGTH)
        return ParseResult.ok(cls(TransparentP2PKHReceiver(data), networks[hrp], address))
