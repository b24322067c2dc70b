import threading
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from zcash_keys.core.exceptions import BackendUnavailableError, InvalidKeyError, ZcashError

class CryptoBackend(ABC):
    """
    Curve arithmetic for the shielded pools.

    Everything that is hashing or modular arithmetic (PRF^expand, ToScalar,
    dk/ovk derivation, ZIP-32 chain codes) is computed by zcash_keys itself.
    Implementations only provide group operations, Sinsemilla/CRH commitments
    and FF1 diversifier encryption. All arguments and results are fixed-size
    little-endian byte strings; None means the protocol admits no result.
    """

    @abstractmethod
    def orchard_ak(self, ask: bytes) -> Optional[bytes]:
        """repr_P([ask] G) for a 32-byte spend authorizing scalar; None when ask is zero"""
        pass

    @abstractmethod
    def orchard_ivk(self, ak: bytes, nk: bytes, rivk: bytes) -> Optional[bytes]:
        """Commit^ivk_rivk(ak, nk) as 32 bytes; None when the commitment is zero or undefined"""
        pass

    @abstractmethod
    def orchard_receiver(self, dk: bytes, ivk: bytes, diversifier_index: bytes) -> Optional[bytes]:
        """43-byte d || pk_d for an 11-byte diversifier index"""
        pass

    @abstractmethod
    def orchard_diversifier_index(self, dk: bytes, ivk: bytes, receiver: bytes) -> Optional[bytes]:
        """11-byte diversifier index that produced ``receiver``, or None if it is not ours"""
        pass

    @abstractmethod
    def sapling_ak_nk(self, ask: bytes, nsk: bytes) -> Optional[Tuple[bytes, bytes]]:
        """Spend validating key ak = [ask] G and nullifier deriving key nk = [nsk] H"""
        pass

    @abstractmethod
    def sapling_internal_nk(self, nk: bytes, i_nsk: bytes) -> Optional[bytes]:
        """nk + [i_nsk] H, the nullifier deriving key of the internal (change) key"""
        pass

    @abstractmethod
    def sapling_ivk(self, ak: bytes, nk: bytes) -> Optional[bytes]:
        """CRH^ivk(ak, nk) as 32 bytes; None when it is zero"""
        pass

    @abstractmethod
    def sapling_receiver(self, dk: bytes, ivk: bytes, diversifier_index: bytes) -> Optional[bytes]:
        """43-byte d || pk_d, or None when the index yields no valid diversifier"""
        pass

    @abstractmethod
    def sapling_diversifier_index(self, dk: bytes, ivk: bytes, receiver: bytes) -> Optional[bytes]:
        """11-byte diversifier index that produced ``receiver``, or None if it is not ours"""
        pass

_backend: Optional[CryptoBackend] = None
_backend_lock = threading.Lock()

def set_backend(backend: Optional[CryptoBackend]) -> Optional[CryptoBackend]:
    """Install the backend used for shielded key operations; returns the previous one"""
    global _backend
    if backend is not None and not isinstance(backend, CryptoBackend):
        raise TypeError(f"Expected a CryptoBackend, got {type(backend).__name__}")
    with _backend_lock:
        previous = _backend
        _backend = backend
    return previous

def get_backend() -> CryptoBackend:
    backend = _backend
    if backend is None:
        raise BackendUnavailableError(
            "No crypto backend installed; call zcash_keys.set_backend() before using shielded keys")
    return backend

def has_backend() -> bool:
    return _backend is not None

def call_backend(operation: str, *args):
    """Invoke a backend operation, reporting its failures as InvalidKeyError"""
    backend = get_backend()
    try:
        return getattr(backend, operation)(*args)
    except ZcashError:
        raise
    except Exception as e:
        raise InvalidKeyError(f"Crypto backend {operation} failed: {e}") from e
