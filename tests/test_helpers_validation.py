import pytest

from zcash_keys.addresses import SaplingAddress, TransparentP2PKHAddress
from zcash_keys.core.zcash_types import Network
from zcash_keys.utils.helpers import create_seed, generate_mnemonic, mnemonic_to_seed, validate_mnemonic
from zcash_keys.utils import validation

SAPLING = "zs1znewe2leucm8gsd2ue24kvp3jjjwgrhmytmv0scenaf460kdj70r299a88r8n0pyvwz7c9skfmy"
P2PKH = "t1a7w3qM23i4ajQcbX5wd6oH4zTY8Bry5vF"

def test_bip39_seed_vector(mnemonic_phrase):
    seed = mnemonic_to_seed(mnemonic_phrase, "TREZOR")
    assert seed.hex().startswith("c55257c360c07c72029aebc1b53c05ed0362ada38ead3e3e9efa3708e5349553")
    assert len(seed) == 64

def test_generate_mnemonic():
    phrase = generate_mnemonic()
    assert len(phrase.split()) == 24
    assert validate_mnemonic(phrase)
    assert len(generate_mnemonic(128).split()) == 12
    with pytest.raises(ValueError):
        generate_mnemonic(100)

def test_create_seed():
    phrase, seed = create_seed(128)
    assert mnemonic_to_seed(phrase) == seed

def test_invalid_mnemonic():
    assert not validate_mnemonic("abandon " * 12)
    with pytest.raises(ValueError):
        mnemonic_to_seed("not a mnemonic")

def test_validate_address_format():
    assert validation.validate_address_format(SAPLING)
    assert validation.validate_address_format(SAPLING, Network.MAINNET)
    assert validation.validate_address_format(SAPLING, "mainnet")
    assert not validation.validate_address_format(SAPLING, Network.TESTNET)
    assert validation.validate_address_format(P2PKH, address_type=TransparentP2PKHAddress)
    assert not validation.validate_address_format(P2PKH, address_type=SaplingAddress)
    assert not validation.validate_address_format("")
    assert not validation.validate_address_format(SAPLING[:-1])

def test_validate_shielded_address():
    assert validation.validate_shielded_address(SAPLING)
    assert not validation.validate_shielded_address(P2PKH)

def test_validate_mnemonic_word_count(mnemonic_phrase):
    assert validation.validate_mnemonic(mnemonic_phrase)
    assert not validation.validate_mnemonic("abandon about")
    assert not validation.validate_mnemonic(None)
