# zcash_keys/utils/validation.py
from typing import Optional, Type

from zcash_keys.core.zcash_types import Network

def get_address_class():
    from zcash_keys.addresses.base import ZcashAddress
    return ZcashAddress

def validate_address_format(address: str, network: Optional[Network] = None,
                            address_type: Optional[Type] = None) -> bool:
    """Soft check that ``address`` parses, optionally on a given network and of a given class"""
    if not isinstance(address, str) or not address:
        return False
    if isinstance(network, str):
        network = Network(network.lower())

    result = get_address_class().try_parse(address)
    if not result.success:
        return False
    parsed = result.value
    if network is not None and parsed.network != network:
        return False
    if address_type is not None and not isinstance(parsed, address_type):
        return False
    return True

def validate_shielded_address(address: str, network: Optional[Network] = None) -> bool:
    """True for addresses that can receive into a shielded pool"""
    if not validate_address_format(address, network):
        return False
    return get_address_class().parse(address).has_shielded_receiver

def validate_mnemonic(mnemonic_phrase: str, language: str = "english") -> bool:
    """Validate BIP39 mnemonic phrase"""
    from mnemonic import Mnemonic
    if not isinstance(mnemonic_phrase, str):
        return False
    words = mnemonic_phrase.split()
    if len(words) not in (12, 15, 18, 21, 24):
        return False
    return Mnemonic(language).check(mnemonic_phrase)
