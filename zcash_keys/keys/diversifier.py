# zcash_keys/keys/diversifier.py
from dataclasses import dataclass
from typing import Union

@dataclass(frozen=True, order=True)
class DiversifierIndex:
    """An 11-byte little-endian index selecting one of a key's receivers"""
    value: int = 0

    LENGTH = 11
    MAX_VALUE = 2 ** 88 - 1

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Diversifier index must be an int, got {type(self.value).__name__}")
        if not 0 <= self.value <= self.MAX_VALUE:
            raise ValueError(f"Diversifier index out of range: {self.value}")

    @classmethod
    def from_bytes(cls, data: bytes) -> 'DiversifierIndex':
        if len(data) != cls.LENGTH:
            raise ValueError(f"Diversifier index must be {cls.LENGTH} bytes, got {len(data)}")
        return cls(int.from_bytes(data, 'little'))

    @classmethod
    def of(cls, index: Union['DiversifierIndex', int, bytes]) -> 'DiversifierIndex':
        """Accept an index in any of its usual forms"""
        if isinstance(index, DiversifierIndex):
            return index
        if isinstance(index, (bytes, bytearray)):
            return cls.from_bytes(bytes(index))
        return cls(index)

    def to_bytes(self) -> bytes:
        return self.value.to_bytes(self.LENGTH, 'little')

    def increment(self) -> 'DiversifierIndex':
        """The next index; raises OverflowError at the end of the range"""
        if self.value == self.MAX_VALUE:
            raise OverflowError("Diversifier index space exhausted")
        return DiversifierIndex(self.value + 1)

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def __int__(self) -> int:
        return self.value
