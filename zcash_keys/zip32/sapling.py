# zcash_keys/zip32/sapling.py
import struct
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Union

from zcash_keys.core.exceptions import InvalidKeyError, UnsupportedDerivationError
from zcash_keys.core.zcash_types import DecodeError, DecodeResult, Network
from zcash_keys.crypto.bech32 import Bech32
from zcash_keys.crypto.blake2 import (
    JUBJUB_ORDER, PrfExpandCode, blake2b, int_to_le_bytes, le32, le_bytes_to_int, prf_expand, to_scalar_jubjub
)
from zcash_keys.keys.sapling import (
    DiversifiableFullViewingKey, ExpandedSpendingKey, FullViewingKey, IncomingViewingKey, internal_key_material
)
from zcash_keys.zip32.common import (
    DerivationInfo, SHIELDED_PURPOSE, account_path, master_derivation_error,
    parse_path, require_hardened, split_i
)
from zcash_keys.utils.logging import get_logger, register_secret

logger = get_logger(__name__)

MASTER_PERSONALIZATION = b"ZcashIP32Sapling"
ENCODED_LENGTH = 169

def _write_derivation(derivation: DerivationInfo) -> bytes:
    return (bytes([derivation.depth]) + derivation.parent_fingerprint_tag
            + struct.pack('<I', derivation.child_index) + derivation.chain_code)

def _read_derivation(data: bytes) -> DerivationInfo:
    return DerivationInfo(data[9:41], data[1:5], data[0], struct.unpack('<I', data[5:9])[0])

def _try_decode(encoded: str, hrps: dict, what: str) -> DecodeResult:
    """Shared Bech32 framing of the 169-byte Sapling extended key encodings"""
    decoded = Bech32.try_decode(encoded)
    if not decoded.success:
        return decoded
    hrp, data = decoded.value
    if hrp not in hrps:
        return DecodeResult.failure(DecodeError.UNRECOGNIZED_HRP, f"Unexpected bech32 tag for {what}: {hrp}")
    if len(data) != ENCODED_LENGTH:
        return DecodeResult.failure(DecodeError.UNEXPECTED_LENGTH,
                                    f"Expected {ENCODED_LENGTH} bytes for {what}, but got {len(data)}.")
    problem = master_derivation_error(data[0], data[1:5], struct.unpack('<I', data[5:9])[0])
    if problem is not None:
        return DecodeResult.failure(DecodeError.INVALID_DERIVATION_DATA, problem)
    return DecodeResult.ok((hrps[hrp], data))

@dataclass(frozen=True)
class ExtendedFullViewingKey:
    """Sapling ZIP-32 extended full viewing key"""
    key: DiversifiableFullViewingKey
    derivation: DerivationInfo

    MAINNET_HRP = "zxviews"
    TESTNET_HRP = "zxviewtestsapling"

    @property
    def network(self) -> Network:
        return self.key.network

    @property
    def full_viewing_key(self) -> FullViewingKey:
        return self.key.full_viewing_key

    @property
    def incoming_viewing_key(self) -> IncomingViewingKey:
        return self.key.incoming_viewing_key

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
    def fingerprint(self) -> bytes:
        return self.key.fingerprint

    def derive(self, child_index: int) -> 'ExtendedFullViewingKey':
        """Shielded children are hardened, so only the extended spending key can derive them"""
        raise UnsupportedDerivationError(
            f"Cannot derive child {child_index} from a Sapling extended full viewing key")

    def to_bytes(self) -> bytes:
        return _write_derivation(self.derivation) + self.key.to_bytes()

    @property
    def encoded(self) -> str:
        return Bech32.encode(self.TESTNET_HRP if self.network.is_testnet else self.MAINNET_HRP, self.to_bytes())

    def __str__(self) -> str:
        return self.encoded

    @classmethod
    def try_from_encoded(cls, encoded: str) -> DecodeResult:
        result = _try_decode(encoded, {cls.MAINNET_HRP: Network.MAINNET, cls.TESTNET_HRP: Network.TESTNET},
                             "a Sapling extended full viewing key")
        if not result.success:
            return result
        network, data = result.value
        try:
            key = DiversifiableFullViewingKey.from_bytes(data[41:], network)
        except ValueError as e:
            return DecodeResult.failure(DecodeError.INVALID_KEY, str(e))
        return DecodeResult.ok(cls(key, _read_derivation(data)))

    @classmethod
    def from_encoded(cls, encoded: str) -> 'ExtendedFullViewingKey':
        return cls.try_from_encoded(encoded).unwrap()

@dataclass(frozen=True)
class ExtendedSpendingKey:
    """Sapling ZIP-32 extended spending key (expanded spending key plus dk)"""
    expanded_spending_key: ExpandedSpendingKey
    dk: bytes
    derivation: DerivationInfo

    MAINNET_HRP = "secret-extended-key-main"
    TESTNET_HRP = "secret-extended-key-test"

    def __post_init__(self):
        if len(self.dk) != 32:
            raise ValueError(f"dk must be 32 bytes, got {len(self.dk)}")

    def __repr__(self) -> str:
        return (f"ExtendedSpendingKey(pool=sapling, depth={self.depth}, "
                f"child_index={self.child_index}, network={self.network.value})")

    @classmethod
    def create(cls, seed: bytes, network: Network = Network.MAINNET) -> 'ExtendedSpendingKey':
        """Master key from a seed of 32 to 252 bytes"""
        if not 32 <= len(seed) <= 252:
            raise ValueError(f"Seed must be 32 to 252 bytes, got {len(seed)}")
        sk, chain_code = split_i(blake2b(seed, MASTER_PERSONALIZATION))
        expsk = ExpandedSpendingKey.from_spending_key(sk, network)
        dk = prf_expand(sk, PrfExpandCode.SAPLING_DK)[:32]
        return cls(expsk, dk, DerivationInfo(chain_code))

    @classmethod
    def create_account(cls, seed: bytes, account: int = 0,
                       network: Network = Network.MAINNET) -> 'ExtendedSpendingKey':
        """``m/32'/coin_type'/account'``"""
        return cls.create(seed, network).derive_path(account_path(SHIELDED_PURPOSE, network, account))

    @property
    def network(self) -> Network:
        return self.expanded_spending_key.network

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

    @cached_property
    def full_viewing_key(self) -> DiversifiableFullViewingKey:
        return DiversifiableFullViewingKey(self.expanded_spending_key.full_viewing_key, self.dk)

    @property
    def extended_full_viewing_key(self) -> ExtendedFullViewingKey:
        return ExtendedFullViewingKey(self.full_viewing_key, self.derivation)

    @property
    def incoming_viewing_key(self) -> IncomingViewingKey:
        return self.full_viewing_key.incoming_viewing_key

    @property
    def fingerprint(self) -> bytes:
        return self.full_viewing_key.fingerprint

    def derive(self, child_index: int) -> 'ExtendedSpendingKey':
        """Hardened child key"""
        child_index = require_hardened(child_index, "Sapling")
        expsk = self.expanded_spending_key
        i = prf_expand(self.chain_code, PrfExpandCode.SAPLING_EXT_SK,
                       expsk.to_bytes(), self.dk, le32(child_index))
        i_l, chain_code = split_i(i)

        ask = (to_scalar_jubjub(prf_expand(i_l, PrfExpandCode.SAPLING_ASK_DERIVE))
               + le_bytes_to_int(expsk.ask)) % JUBJUB_ORDER
        nsk = (to_scalar_jubjub(prf_expand(i_l, PrfExpandCode.SAPLING_NSK_DERIVE))
               + le_bytes_to_int(expsk.nsk)) % JUBJUB_ORDER
        ovk = prf_expand(i_l, PrfExpandCode.SAPLING_OVK_DERIVE, expsk.ovk)[:32]
        dk = prf_expand(i_l, PrfExpandCode.SAPLING_DK_DERIVE, self.dk)[:32]

        logger.debug("Derived Sapling child key", depth=self.depth + 1, child_index=child_index)
        child_expsk = ExpandedSpendingKey(int_to_le_bytes(ask), int_to_le_bytes(nsk), ovk, self.network)
        return ExtendedSpendingKey(child_expsk, dk, self.derivation.child(chain_code, self.fingerprint, child_index))

    def derive_internal(self) -> 'ExtendedSpendingKey':
        """
        The internal (change) key of this account.

        nsk gains i_nsk while ask and the chain code are kept, so its full
        viewing key equals ``full_viewing_key.derive_internal()``.
        """
        i_nsk, dk, ovk = internal_key_material(self.full_viewing_key.to_bytes())
        expsk = self.expanded_spending_key
        nsk = (le_bytes_to_int(expsk.nsk) + i_nsk) % JUBJUB_ORDER
        internal = ExpandedSpendingKey(expsk.ask, int_to_le_bytes(nsk), ovk, self.network)
        return ExtendedSpendingKey(internal, dk, self.derivation)

    def derive_path(self, path: Union[str, Iterable[int]]) -> 'ExtendedSpendingKey':
        key = self
        for index in parse_path(path):
            key = key.derive(index)
        return key

    def to_bytes(self) -> bytes:
        return _write_derivation(self.derivation) + self.expanded_spending_key.to_bytes() + self.dk

    @property
    def encoded(self) -> str:
        encoded = Bech32.encode(self.TESTNET_HRP if self.network.is_testnet else self.MAINNET_HRP, self.to_bytes())
        register_secret(encoded)
        return encoded

    @classmethod
    def try_from_encoded(cls, encoded: str) -> DecodeResult:
        result = _try_decode(encoded, {cls.MAINNET_HRP: Network.MAINNET, cls.TESTNET_HRP: Network.TESTNET},
                             "a Sapling extended spending key")
        if not result.success:
            return result
        network, data = result.value
        try:
            expsk = ExpandedSpendingKey.from_bytes(data[41:137], network)
        except (ValueError, InvalidKeyError) as e:
            return DecodeResult.failure(DecodeError.INVALID_KEY, str(e))
        return DecodeResult.ok(cls(expsk, data[137:], _read_derivation(data)))

    @classmethod
    def from_encoded(cls, encoded: str) -> 'ExtendedSpendingKey':
        return cls.try_from_encoded(encoded).unwrap()
