# zcash_keys/core/memo.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from zcash_keys.core.exceptions import MemoError

MEMO_LENGTH = 512
PROPRIETARY_DATA_LENGTH = 511

NO_MEMO_MARKER = 0xF6
PROPRIETARY_MARKER = 0xFF
MAX_TEXT_LEAD_BYTE = 0xF4

class MemoFormat(Enum):
    """ZIP-302 memo interpretations, chosen by the first byte"""
    NO_MEMO = "no_memo"
    MESSAGE = "message"
    PROPRIETARY_DATA = "proprietary_data"
    RESERVED = "reserved"

@dataclass(frozen=True)
class Memo:
    """The 512-byte memo field of a shielded output"""
    data: bytes

    def __post_init__(self):
        if len(self.data) != MEMO_LENGTH:
            raise MemoError(f"Memo must be {MEMO_LENGTH} bytes, got {len(self.data)}")
        object.__setattr__(self, 'data', bytes(self.data))

    @classmethod
    def no_memo(cls) -> 'Memo':
        return cls(bytes([NO_MEMO_MARKER]) + bytes(PROPRIETARY_DATA_LENGTH))

    @classmethod
    def from_message(cls, text: str) -> 'Memo':
        """UTF-8 text, zero filled to 512 bytes"""
        encoded = text.encode('utf-8')
        if len(encoded) > MEMO_LENGTH:
            raise MemoError(f"Message is {len(encoded)} bytes; memos hold at most {MEMO_LENGTH}")
        if encoded and encoded[0] > MAX_TEXT_LEAD_BYTE:
            # Cannot happen for valid UTF-8, whose lead bytes never exceed 0xF4
            raise MemoError("Message would not be read back as text")
        return cls(encoded.ljust(MEMO_LENGTH, b'\x00'))

    @classmethod
    def from_proprietary_data(cls, data: bytes) -> 'Memo':
        if len(data) > PROPRIETARY_DATA_LENGTH:
            raise MemoError(f"Proprietary data is {len(data)} bytes; at most {PROPRIETARY_DATA_LENGTH} fit")
        return cls(bytes([PROPRIETARY_MARKER]) + bytes(data).ljust(PROPRIETARY_DATA_LENGTH, b'\x00'))

    @property
    def format(self) -> MemoFormat:
        lead = self.data[0]
        if lead <= MAX_TEXT_LEAD_BYTE:
            return MemoFormat.MESSAGE
        if lead == PROPRIETARY_MARKER:
            return MemoFormat.PROPRIETARY_DATA
        if lead == NO_MEMO_MARKER and not any(self.data[1:]):
            return MemoFormat.NO_MEMO
        return MemoFormat.RESERVED

    @property
    def message(self) -> Optional[str]:
        """Text with trailing zero bytes removed, or None when the memo is not text"""
        if self.format != MemoFormat.MESSAGE:
            return None
        return self.data.rstrip(b'\x00').decode('utf-8', errors='replace')

    @property
    def proprietary_data(self) -> Optional[bytes]:
        """The 511 bytes after the marker, or None when the memo is not proprietary"""
        if self.format != MemoFormat.PROPRIETARY_DATA:
            return None
        return self.data[1:]

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return self.message or ""
