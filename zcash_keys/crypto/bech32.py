# zcash_keys/crypto/bech32.py
from typing import List, Optional, Tuple

from zcash_keys.core.zcash_types import DecodeError, DecodeResult


class Bech32:
    """BIP-173 Bech32 codec; subclasses swap the checksum constant"""

    ALPHABET = 'qpzry9x8gf2tvdw0s3jn54khce6mua7l'
    DECODE_MAP = {char: index for index, char in enumerate(ALPHABET)}
    GENERATOR = (0x3b6a57b2, 0x26508e6d, 0x1ea119fa, 0x3d4233dd, 0x2a1462b3)
    SEPARATOR = '1'
    CHECKSUM_LENGTH = 6
    CHECKSUM_CONSTANT = 1

    @classmethod
    def encode(cls, tag: str, data: bytes) -> str:
        """Encode bytes under the given human-readable part"""
        cls._validate_tag(tag)
        tag = tag.lower()

        data5 = cls._regroup_to_5bit(bytes(data))
        checksum = cls._create_checksum(tag, data5)

        return tag + cls.SEPARATOR + ''.join(cls.ALPHABET[v] for v in data5 + checksum)

    @classmethod
    def try_decode(cls, encoded: str, max_data_length: Optional[int] = None) -> DecodeResult:
        """
        Decode without raising for malformed input.
        On success the result value is ``(tag, data)`` with the tag lowercased.
        """
        separator = encoded.rfind(cls.SEPARATOR)
        if separator < 0:
            return DecodeResult.failure(DecodeError.NO_SEPARATOR, "No separator character '1' found.")
        if separator == 0:
            return DecodeResult.failure(DecodeError.NO_SEPARATOR, "The human-readable part is empty.")

        data_char_count = len(encoded) - separator - 1
        if data_char_count < cls.CHECKSUM_LENGTH:
            return DecodeResult.failure(DecodeError.INVALID_CHECKSUM, "Input too short to contain a checksum.")

        if max_data_length is not None:
            needed = (data_char_count - cls.CHECKSUM_LENGTH) * 5 // 8
            if needed > max_data_length:
                return DecodeResult.failure(
                    DecodeError.BUFFER_TOO_SMALL,
                    f"Decoded data requires {needed} bytes but only {max_data_length} are available.")

        if encoded.lower() != encoded and encoded.upper() != encoded:
            return DecodeResult.failure(DecodeError.INVALID_CHARACTER, "Mixed case detected.")

        lowered = encoded.lower()
        tag = lowered[:separator]
        for index, char in enumerate(tag):
            if not 33 <= ord(char) <= 126:
                return DecodeResult.failure(
                    DecodeError.INVALID_CHARACTER, f"Invalid character '{char}' at index {index}.")

        values = []
        for index in range(separator + 1, len(lowered)):
            value = cls.DECODE_MAP.get(lowered[index])
            if value is None:
                return DecodeResult.failure(
                    DecodeError.INVALID_CHARACTER, f"Invalid character '{encoded[index]}' at index {index}.")
            values.append(value)

        if cls._polymod(cls._expand_tag(tag) + values) != cls.CHECKSUM_CONSTANT:
            return DecodeResult.failure(DecodeError.INVALID_CHECKSUM,
                                        "Checksum failure.")

        data, error = cls._regroup_to_8bit(values[:-cls.CHECKSUM_LENGTH])
        if error is not None:
            return DecodeResult.failure(DecodeError.BAD_PADDING, error)

        return DecodeResult.ok((tag, data))

    @classmethod
    def decode(cls, encoded: str, max_data_length: Optional[int] = None) -> Tuple[str, bytes]:
        """Decode, raising FormatError for malformed input"""
        result = cls.try_decode(encoded, max_data_length)
        if result.error == DecodeError.BUFFER_TOO_SMALL:
            raise ValueError(result.message)
        return result.unwrap()

    @classmethod
    def get_encoded_length(cls, tag_length: int, data_length: int) -> int:
        return tag_length + 1 + (data_length * 8 + 4) // 5 + cls.CHECKSUM_LENGTH

    @classmethod
    def get_decoded_length(cls, encoded: str) -> Optional[Tuple[int, int]]:
        """Tag and data lengths an encoded string would decode to, or None if it cannot"""
        separator = encoded.rfind(cls.SEPARATOR)
        if separator < 1:
            return None
        data_char_count = len(encoded) - separator - 1 - cls.CHECKSUM_LENGTH
        if data_char_count < 0:
            return None
        return separator, data_char_count * 5 // 8

    @classmethod
    def _validate_tag(cls, tag: str) -> None:
        if not tag:
            raise ValueError("The human-readable part must not be empty.")
        for char in tag:
            if not 33 <= ord(char) <= 126:
                raise ValueError(f"Invalid character in human-readable part: {char!r}")

    @staticmethod
    def _expand_tag(tag: str) -> List[int]:
        return [ord(c) >> 5 for c in tag] + [0] + [ord(c) & 31 for c in tag]

    @classmethod
    def _polymod(cls, values: List[int]) -> int:
        chk = 1
        for value in values:
            top = chk >> 25
            chk = (chk & 0x1ffffff) << 5 ^ value
            for i in range(5):
                if (top >> i) & 1:
                    chk ^= cls.GENERATOR[i]
        return chk

    @classmethod
    def _create_checksum(cls, tag: str, data5: List[int]) -> List[int]:
        values = cls._expand_tag(tag) + data5
        polymod = cls._polymod(values + [0] * cls.CHECKSUM_LENGTH) ^ cls.CHECKSUM_CONSTANT
        return [(polymod >> 5 * (5 - i)) & 31 for i in range(cls.CHECKSUM_LENGTH)]

    @staticmethod
    def _regroup_to_5bit(data: bytes) -> List[int]:
        result = []
        buffer = 0
        bits_in_buffer = 0

        for byte in data:
            buffer = (buffer << 8) | byte
            bits_in_buffer += 8
            while bits_in_buffer >= 5:
                bits_in_buffer -= 5
                result.append((buffer >> bits_in_buffer) & 31)
            buffer &= (1 << bits_in_buffer) - 1

        if bits_in_buffer > 0:
            result.append((buffer << (5 - bits_in_buffer)) & 31)

        return result

    @staticmethod
    def _regroup_to_8bit(data5: List[int]) -> Tuple[bytes, Optional[str]]:
        result = bytearray()
        buffer = 0
        bits_in_buffer = 0

        for value in data5:
            buffer = (buffer << 5) | value
            bits_in_buffer += 5
            if bits_in_buffer >= 8:
                bits_in_buffer -= 8
                result.append((buffer >> bits_in_buffer) & 0xff)
            buffer &= (1 << bits_in_buffer) - 1

        # Leftover bits are padding: fewer than one group, all zero
        if bits_in_buffer >= 5:
            return b"", "Invalid length for Bech32 encoding."
        if buffer != 0:
            return b"", "Invalid padding."

        return bytes(result), None

class Bech32m(Bech32):
    """BIP-350 Bech32m codec"""

    CHECKSUM_CONSTANT = 0x2bc830a3

