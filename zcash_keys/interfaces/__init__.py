from .crypto_backend import CryptoBackend, set_backend, get_backend, has_backend

__all__ = ['CryptoBackend', 'set_backend', 'get_backend', 'has_backend']
