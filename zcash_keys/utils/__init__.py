from .logging import setup_logging, get_logger, register_secret, LogManager
from .helpers import generate_mnemonic, validate_mnemonic, mnemonic_to_seed, create_seed
from .validation import validate_address_format, validate_shielded_address

__all__ = [
    'setup_logging',
    'get_logger',
    'LogManager',
    'register_secret',
    'generate_mnemonic',
    'validate_mnemonic',
    'mnemonic_to_seed',
    'create_seed',
    'validate_address_format',
    'validate_shielded_address'
]
