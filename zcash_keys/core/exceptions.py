#zcash_keys/core/exceptions.py
from typing import Optional


class ZcashError(Exception):
    """Base exception for zcash_keys errors"""
    pass

class FormatError(ZcashError, ValueError):
    """Malformed encoded input (bad checksum, character, padding, length...)"""

    def __init__(self, message: str, code=None):
        super().__init__(message)
        self.code = code
        self.message = message

class InvalidKeyError(ZcashError):
    """Key material failed validation or could not be processed"""
    pass

class BackendUnavailableError(InvalidKeyError):
    """No native crypto backend has been installed"""
    pass

class InvalidAddressError(ZcashError):
    """Address could not be parsed"""

    def __init__(self, message: str, code=None, decode_error: Optional[object] = None):
        super().__init__(message)
        self.code = code
        self.decode_error = decode_error
        self.message = message

class UnsupportedDerivationError(ZcashError, ValueError):
    """Derivation request the pool does not support (e.g. non-hardened shielded child)"""
    pass

class MemoError(ZcashError, ValueError):
    """Memo content does not fit the 512-byte memo field"""
    pass
