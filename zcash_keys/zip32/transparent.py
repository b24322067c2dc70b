# zcash_keys/zip32/transparent.py
"""
BIP-32 extended keys for the transparent pool.

Child derivation is delegated to the ``bip32`` library; the 78-byte
serialization is handled here so Zcash's versions and the decode error
ordering stay under our control.
"""
import hashlib
import struct
from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, Union

from bip32 import BIP32
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from Crypto.Hash import RIPEMD160

from zcash_keys.core.exceptions import InvalidKeyError
from zcash_keys.core.zcash_types import DecodeError, DecodeResult, Network
from zcash_keys.crypto.base58check import Base58Check
from zcash_keys.zip32.common import (
    DerivationInfo, TRANSPARENT_PURPOSE, account_path, check_child_index, is_hardened,
    master_derivation_error, parse_path
)
from zcash_keys.utils.logging import register_secret

SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
EXTENDED_KEY_LENGTH = 78
PUBLIC_KEY_LENGTH = 33

class ExtendedKeyVersion:
    """Four-byte BIP-32 serialization versions"""
    PRIVATE_MAINNET = bytes.fromhex("0488ADE4")
    PUBLIC_MAINNET = bytes.fromhex("0488B21E")
    PRIVATE_TESTNET = bytes.fromhex("04358394")
    PUBLIC_TESTNET = bytes.fromhex("043587CF")

    @classmethod
    def lookup(cls, version: bytes):
        """``(is_private, network)`` for a known version, else None"""
        return {
            cls.PRIVATE_MAINNET: (True, Network.MAINNET),
            cls.PUBLIC_MAINNET: (False, Network.MAINNET),
            cls.PRIVATE_TESTNET: (True, Network.TESTNET),
            cls.PUBLIC_TESTNET: (False, Network.TESTNET),
        }.get(bytes(version))

def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()

def _bip32_network(network: Network) -> str:
    return "test" if network.is_testnet else "main"

def public_key_from_private(private_key: bytes) -> bytes:
    """Compressed secp256k1 public key"""
    try:
        key = ec.derive_private_key(int.from_bytes(private_key, 'big'), ec.SECP256K1())
    except ValueError as e:
        raise InvalidKeyError(f"Invalid secp256k1 private key: {e}") from e
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.CompressedPoint
    )

def validate_public_key(public_key: bytes) -> bytes:
    if len(public_key) != PUBLIC_KEY_LENGTH or public_key[0] not in (0x02, 0x03):
        raise InvalidKeyError("Expected a 33-byte compressed secp256k1 public key")
    try:
        ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), public_key)
    except ValueError as e:
        raise InvalidKeyError(f"Invalid secp256k1 public key: {e}") from e
    return bytes(public_key)

def validate_private_key(private_key: bytes) -> bytes:
    if len(private_key) != 32:
        raise InvalidKeyError("Expected a 32-byte secp256k1 private key")
    if not 0 < int.from_bytes(private_key, 'big') < SECP256K1_ORDER:
        raise InvalidKeyError("Invalid private key.")
    return bytes(private_key)

@dataclass(frozen=True)
class ExtendedViewingKey:
    """BIP-32 extended public key"""
    public_key: bytes
    derivation: DerivationInfo
    network: Network = Network.MAINNET

    def __post_init__(self):
        object.__setattr__(self, 'public_key', validate_public_key(self.public_key))

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
    def parent_fingerprint(self) -> bytes:
        return self.derivation.parent_fingerprint_tag

    @property
    def identifier(self) -> bytes:
        return hash160(self.public_key)

    @property
    def fingerprint(self) -> bytes:
        return self.identifier[:4]

    def _bip32(self) -> BIP32:
        return BIP32(self.chain_code, pubkey=self.public_key, network=_bip32_network(self.network))

    def derive(self, child_index: int) -> 'ExtendedViewingKey':
        """Non-hardened child; hardened indexes need the private key"""
        child_index = check_child_index(child_index)
        if is_hardened(child_index):
            raise ValueError("Hardened derivation requires an extended private key")
        try:
            chain_code, public_key = self._bip32().get_extended_pubkey_from_path([child_index])
        except Exception as e:
            raise InvalidKeyError(f"Public child derivation failed at index {child_index}: {e}") from e
        return ExtendedViewingKey(public_key, self.derivation.child(chain_code, self.fingerprint, child_index),
                                  self.network)

    def derive_path(self, path: Union[str, Iterable[int]]) -> 'ExtendedViewingKey':
        key = self
        for index in parse_path(path):
            key = key.derive(index)
        return key

    def to_bytes(self) -> bytes:
        version = ExtendedKeyVersion.PUBLIC_TESTNET if self.network.is_testnet else ExtendedKeyVersion.PUBLIC_MAINNET
        return _serialize(version, self.derivation, self.public_key)

    @property
    def encoded(self) -> str:
        return Base58Check.encode(self.to_bytes())

    def __str__(self) -> str:
        return self.encoded

@dataclass(frozen=True)
class ExtendedSpendingKey:
    """BIP-32 extended private key"""
    private_key: bytes
    derivation: DerivationInfo
    network: Network = Network.MAINNET

    def __post_init__(self):
        object.__setattr__(self, 'private_key', validate_private_key(self.private_key))

    def __repr__(self) -> str:
        return (f"ExtendedSpendingKey(depth={self.depth}, child_index={self.child_index}, "
                f"network={self.network.value})")

    @classmethod
    def create(cls, seed: bytes, network: Network = Network.MAINNET) -> 'ExtendedSpendingKey':
        """Master key from a BIP-39 seed"""
        if not 16 <= len(seed) <= 64:
            raise ValueError(f"Seed must be 16 to 64 bytes, got {len(seed)}")
        master = BIP32.from_seed(seed, network=_bip32_network(network))
        chain_code, private_key = master.get_extended_privkey_from_path([])
        return cls(private_key, DerivationInfo(chain_code), network)

    @classmethod
    def create_account(cls, seed: bytes, account: int = 0,
                       network: Network = Network.MAINNET) -> 'ExtendedSpendingKey':
        """``m/44'/coin_type'/account'``"""
        return cls.create(seed, network).derive_path(account_path(TRANSPARENT_PURPOSE, network, account))

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
    def parent_fingerprint(self) -> bytes:
        return self.derivation.parent_fingerprint_tag

    @cached_property
    def public_key(self) -> bytes:
        return public_key_from_private(self.private_key)

    @property
    def fingerprint(self) -> bytes:
        return hash160(self.public_key)[:4]

    @cached_property
    def extended_viewing_key(self) -> ExtendedViewingKey:
        return ExtendedViewingKey(self.public_key, self.derivation, self.network)

    def derive(self, child_index: int) -> 'ExtendedSpendingKey':
        child_index = check_child_index(child_index)
        bip32 = BIP32(self.chain_code, privkey=self.private_key, network=_bip32_network(self.network))
        try:
            chain_code, private_key = bip32.get_extended_privkey_from_path([child_index])
        except Exception as e:
            raise InvalidKeyError(f"Private child derivation failed at index {child_index}: {e}") from e
        return ExtendedSpendingKey(private_key, self.derivation.child(chain_code, self.fingerprint, child_index),
                                   self.network)

    def derive_path(self, path: Union[str, Iterable[int]]) -> 'ExtendedSpendingKey':
        key = self
        for index in parse_path(path):
            key = key.derive(index)
        return key

    def to_bytes(self) -> bytes:
        version = ExtendedKeyVersion.PRIVATE_TESTNET if self.network.is_testnet else ExtendedKeyVersion.PRIVATE_MAINNET
        return _serialize(version, self.derivation, b'\x00' + self.private_key)

    @property
    def encoded(self) -> str:
        encoded = Base58Check.encode(self.to_bytes())
        register_secret(encoded)
        return encoded

def _serialize(version: bytes, derivation: DerivationInfo, key_material: bytes) -> bytes:
    data = (version + bytes([derivation.depth]) + derivation.parent_fingerprint_tag
            + struct.pack('>I', derivation.child_index) + derivation.chain_code + key_material)
    if len(data) != EXTENDED_KEY_LENGTH:
        raise ValueError(f"Extended key must serialize to {EXTENDED_KEY_LENGTH} bytes, got {len(data)}")
    return data

def try_decode_extended_key(encoded: str) -> DecodeResult:
    """Decode an xprv/xpub style string into an ExtendedSpendingKey or ExtendedViewingKey"""
    decoded = Base58Check.try_decode(encoded)
    if not decoded.success:
        return decoded
    data: bytes = decoded.value

    if len(data) != EXTENDED_KEY_LENGTH:
        return DecodeResult.failure(DecodeError.UNEXPECTED_LENGTH,
                                    f"Expected {EXTENDED_KEY_LENGTH} bytes after base58 decoding, but got {len(data)}.")

    version = data[:4]
    depth = data[4]
    parent_tag = data[5:9]
    child_index = struct.unpack('>I', data[9:13])[0]
    chain_code = data[13:45]
    key_material = data[45:]

    problem = master_derivation_error(depth, parent_tag, child_index)
    if problem is not None:
        return DecodeResult.failure(DecodeError.INVALID_DERIVATION_DATA, problem)

    kind = ExtendedKeyVersion.lookup(version)
    if kind is None:
        return DecodeResult.failure(DecodeError.UNRECOGNIZED_VERSION, f"Unrecognized version: {version.hex().upper()}")
    is_private, network = kind

    derivation = DerivationInfo(chain_code, parent_tag, depth, child_index)
    if is_private:
        if key_material[0] != 0:
            return DecodeResult.failure(DecodeError.INVALID_KEY, "Expected private key but this may be a public key.")
        try:
            return DecodeResult.ok(ExtendedSpendingKey(key_material[1:], derivation, network))
        except InvalidKeyError:
            return DecodeResult.failure(DecodeError.INVALID_KEY, "Invalid private key.")

    try:
        return DecodeResult.ok(ExtendedViewingKey(key_material, derivation, network))
    except InvalidKeyError:
        return DecodeResult.failure(DecodeError.INVALID_KEY, "Invalid public key.")

def decode_extended_key(encoded: str):
    return try_decode_extended_key(encoded).unwrap()