# zcash_keys/crypto/base58check.py
import hashlib
from typing import Optional

import base58

from zcash_keys.core.zcash_types import DecodeError, DecodeResult

class Base58Check:
    """Base58 with a 4-byte double SHA-256 checksum, as used by transparent and Sprout addresses"""

    ALPHABET = '123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz'
    CHECKSUM_LENGTH = 4

    @classmethod
    def encode(cls, payload: bytes) -> str:
        """Encode ``payload`` (version bytes included) with its checksum appended"""
        return base58.b58encode_check(bytes(payload)).decode('ascii')

    @classmethod
    def try_decode(cls, encoded: str, max_data_length: Optional[int] = None) -> DecodeResult:
        """Decode and verify the checksum; the result value is the payload without checksum"""
        for index, char in enumerate(encoded):
            if char not in cls.ALPHABET:
                return DecodeResult.failure(
                    DecodeError.INVALID_CHARACTER, f"Invalid char {char} found at position {index + 1}.")

        raw = base58.b58decode(encoded)
        if len(raw) < cls.CHECKSUM_LENGTH:
            return DecodeResult.failure(DecodeError.INVALID_CHECKSUM, "Base58Check input too short.")

        payload, checksum = raw[:-cls.CHECKSUM_LENGTH], raw[-cls.CHECKSUM_LENGTH:]
        if cls.checksum(payload) != checksum:
            return DecodeResult.failure(DecodeError.INVALID_CHECKSUM, "Base58Check checksum mismatch.")

        if max_data_length is not None and len(payload) > max_data_length:
            return DecodeResult.failure(
                DecodeError.BUFFER_TOO_SMALL,
                f"Decoded data requires {len(payload)} bytes but only {max_data_length} are available.")

        return DecodeResult.ok(payload)

    @classmethod
    def decode(cls, encoded: str, max_data_length: Optional[int] = None) -> bytes:
        result = cls.try_decode(encoded, max_data_length)
        if result.error == DecodeError.BUFFER_TOO_SMALL:
            raise ValueError(result.message)
        return result.unwrap()

    @staticmethod
    def checksum(payload: bytes) -> bytes:
        return hashlib.sha256(hashlib.sha256(payload).digest()).digest()[:4]
