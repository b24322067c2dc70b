# zcash_keys/zip32/common.py
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from zcash_keys.core.exceptions import UnsupportedDerivationError
from zcash_keys.core.zcash_types import Network

HARDENED_BIT = 0x80000000
MAX_DEPTH = 255
FINGERPRINT_TAG_LENGTH = 4
CHAIN_CODE_LENGTH = 32

# ZIP-32 shielded purpose, BIP-44 transparent purpose
SHIELDED_PURPOSE = 32
TRANSPARENT_PURPOSE = 44

def harden(index: int) -> int:
    if not 0 <= index < HARDENED_BIT:
        raise ValueError(f"Child index out of range: {index}")
    return index | HARDENED_BIT

def is_hardened(index: int) -> bool:
    return bool(index & HARDENED_BIT)

def check_child_index(index: int) -> int:
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"Child index must be an int, got {type(index).__name__}")
    if not 0 <= index <= 0xFFFFFFFF:
        raise ValueError(f"Child index out of range: {index}")
    return index

def require_hardened(index: int, pool: str) -> int:
    index = check_child_index(index)
    if not is_hardened(index):
        raise UnsupportedDerivationError(f"{pool} keys only support hardened derivation, got index {index}")
    return index

def next_depth(depth: int) -> int:
    if depth >= MAX_DEPTH:
        raise ValueError("Maximum derivation depth exceeded")
    return depth + 1

def parse_path(path: Union[str, Iterable[int]]) -> List[int]:
    """Parse ``m/44'/133'/0'`` style paths (``h`` also marks hardening) into child indexes"""
    if not isinstance(path, str):
        return [check_child_index(i) for i in path]

    parts = path.strip().split('/')
    if not parts or parts[0] != 'm':
        raise ValueError(f"Derivation path must start with 'm': {path!r}")

    indexes = []
    for part in parts[1:]:
        hardened = part.endswith("'") or part.endswith("h")
        digits = part[:-1] if hardened else part
        if not digits.isdigit():
            raise ValueError(f"Invalid derivation path component {part!r} in {path!r}")
        index = int(digits)
        if index >= HARDENED_BIT:
            raise ValueError(f"Index too large in {path!r}")
        indexes.append(harden(index) if hardened else index)
    return indexes

def format_path(indexes: Iterable[int]) -> str:
    parts = ['m']
    for index in indexes:
        parts.append(f"{index & ~HARDENED_BIT}'" if is_hardened(index) else str(index))
    return '/'.join(parts)

def account_path(purpose: int, network: Network, account: int) -> List[int]:
    """``m/purpose'/coin_type'/account'``"""
    return [harden(purpose), harden(network.coin_type), harden(account)]

@dataclass(frozen=True)
class DerivationInfo:
    """Bookkeeping shared by every extended key"""
    chain_code: bytes
    parent_fingerprint_tag: bytes = bytes(FINGERPRINT_TAG_LENGTH)
    depth: int = 0
    child_index: int = 0

    def __post_init__(self):
        if len(self.chain_code) != CHAIN_CODE_LENGTH:
            raise ValueError(f"Chain code must be {CHAIN_CODE_LENGTH} bytes, got {len(self.chain_code)}")
        if len(self.parent_fingerprint_tag) != FINGERPRINT_TAG_LENGTH:
            raise ValueError("Parent fingerprint tag must be 4 bytes")
        if not 0 <= self.depth <= MAX_DEPTH:
            raise ValueError(f"Depth out of range: {self.depth}")
        check_child_index(self.child_index)

    @property
    def is_master(self) -> bool:
        return self.depth == 0

    def child(self, chain_code: bytes, parent_fingerprint: bytes, child_index: int) -> 'DerivationInfo':
        return DerivationInfo(chain_code, parent_fingerprint[:FINGERPRINT_TAG_LENGTH],
                              next_depth(self.depth), child_index)

def master_derivation_error(depth: int, parent_tag: bytes, child_index: int) -> Optional[str]:
    """Message for a depth-0 key with non-master bookkeeping, None when consistent"""
    if depth != 0:
        return None
    if child_index != 0:
        return f"The key claims to be a master key but has the non-zero child number {child_index}."
    if any(parent_tag):
        return "The key claims to be a master key but has non-zero parent fingerprint."
    return None

def split_i(i: bytes) -> Tuple[bytes, bytes]:
    return i[:32], i[32:]
