#zcash_keys/core/config.py
from dataclasses import dataclass, field
from typing import Optional
from zcash_keys.core.zcash_types import Network

@dataclass
class KeyConfig:
    """Key derivation and address configuration"""
    network: Network = Network.MAINNET
    account_index: int = 0
    gap_limit: int = 20
    mnemonic_language: str = "english"
    passphrase: str = ""
    coin_type: Optional[int] = field(default=None)

    def __post_init__(self):
        """Initialize derived properties after object creation"""
        self._validate_enum_types()

        if self.coin_type is None:
            self.coin_type = self.network.coin_type

        if self.account_index < 0 or self.account_index >= 0x80000000:
            raise ValueError(f"Account index out of range: {self.account_index}")

        if self.gap_limit < 1:
            raise ValueError(f"Gap limit must be positive: {self.gap_limit}")

    def _validate_enum_types(self):
        """Ensure enum fields remain enum types"""
        # Values loaded from JSON/YAML arrive as strings
        if isinstance(self.network, str):
            self.network = Network(self.network.lower())

    @property
    def is_testnet(self) -> bool:
        return self.network.is_testnet
