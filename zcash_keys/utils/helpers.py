# zcash_keys/utils/helpers.py
from typing import Tuple

from mnemonic import Mnemonic

VALID_STRENGTHS = (128, 160, 192, 224, 256)

def generate_mnemonic(strength: int = 256, language: str = "english") -> str:
    """Generate BIP39 mnemonic phrase"""
    if strength not in VALID_STRENGTHS:
        raise ValueError(f"Mnemonic strength must be one of {VALID_STRENGTHS}, got {strength}")
    return Mnemonic(language).generate(strength=strength)

def validate_mnemonic(mnemonic_phrase: str, language: str = "english") -> bool:
    """Validate BIP39 mnemonic phrase"""
    return Mnemonic(language).check(mnemonic_phrase)

def mnemonic_to_seed(mnemonic_phrase: str, passphrase: str = "", language: str = "english") -> bytes:
    """Convert mnemonic to seed using BIP39"""
    mnemo = Mnemonic(language)
    if not mnemo.check(mnemonic_phrase):
        raise ValueError("Invalid BIP39 mnemonic phrase")
    return Mnemonic.to_seed(mnemonic_phrase, passphrase)

def create_seed(strength: int = 256, passphrase: str = "", language: str = "english") -> Tuple[str, bytes]:
    """New mnemonic and the seed it produces"""
    phrase = generate_mnemonic(strength, language)
    return phrase, mnemonic_to_seed(phrase, passphrase, language)
