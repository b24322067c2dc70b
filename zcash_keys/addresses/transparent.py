# zcash_keys/addresses/transparent.py
from typing import List, Optional

from zcash_keys.addresses.base import ZcashAddress
from zcash_keys.core.zcash_types import Network, ParseError, ParseResult
from zcash_keys.crypto.base58check import Base58Check
from zcash_keys.keys.receivers import TransparentP2PKHReceiver, TransparentP2SHReceiver

DECODED_LENGTH = 22

P2PKH_VERSIONS = {Network.MAINNET: b'\x1c\xb8', Network.TESTNET: b'\x1d\x25'}
P2SH_VERSIONS = {Network.MAINNET: b'\x1c\xbd', Network.TESTNET: b'\x1c\xba'}

class TransparentAddress(ZcashAddress):
    """Base58Check transparent address (t1/t3 on mainnet, tm/t2 on testnet)"""

    VERSIONS: dict = {}
    receiver_type = None

    def __init__(self, receiver, network: Network = Network.MAINNET, address: Optional[str] = None):
        if not isinstance(receiver, self.receiver_type):
            raise TypeError(f"{type(self).__name__} needs a {self.receiver_type.__name__}")
        if address is None:
            address = Base58Check.encode(self.VERSIONS[network] + receiver.data)
        super().__init__(address, network)
        self._receiver = receiver

    @property
    def receiver(self):
        return self._receiver

    @property
    def receivers(self) -> List:
        return [self._receiver]

    @property
    def unified_receiver(self):
        return self._receiver

    @classmethod
    def looks_like(cls, address: str) -> bool:
        return address[:1].lower() == 't' and len(address) > 2

    @classmethod
    def try_parse_text(cls, address: str) -> ParseResult:
        decoded = Base58Check.try_decode(address, max_data_length=DECODED_LENGTH)
        if not decoded.success:
            return ParseResult.from_decode_failure(decoded)
        data = decoded.value
        if len(data) != DECODED_LENGTH:
            return ParseResult.failure(ParseError.INVALID_ADDRESS,
                                       f"Transparent addresses decode to {DECODED_LENGTH} bytes, not {len(data)}.")

        version, payload = data[:2], data[2:]
        for address_cls in (TransparentP2PKHAddress, TransparentP2SHAddress):
            for network, expected in address_cls.VERSIONS.items():
                if version == expected:
                    return ParseResult.ok(address_cls(address_cls.receiver_type(payload), network, address))
        return ParseResult.failure(ParseError.INVALID_ADDRESS, "Unrecognized network header.")

class TransparentP2PKHAddress(TransparentAddress):
    """Pay to public key hash"""
    VERSIONS = P2PKH_VERSIONS
    receiver_type = TransparentP2PKHReceiver

class TransparentP2SHAddress(TransparentAddress):
    """Pay to script hash"""
    VERSIONS = P2SH_VERSIONS
    receiver_type = TransparentP2SHReceiver
