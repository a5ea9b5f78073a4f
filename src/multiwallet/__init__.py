"""
multiwallet - single-seed wallet for Bitcoin, Ethereum and ERC-20 tokens

Provides seed storage, BIP32 derivation, P2WPKH transaction construction
and EIP-1559 transaction signing.
"""

__version__ = "1.0.0"

from multiwallet.config import FeePolicy, ProviderInfo, ProviderType, WalletConfig, load_config
from multiwallet.errors import (
    AddressDecodeError,
    AmountTooSmallError,
    ConfigError,
    DecryptionFailedError,
    DerivationFailedError,
    GasEstimationError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidMnemonicError,
    InvalidPathComponentError,
    NetworkRequestError,
    ScriptBuildError,
    SerializationError,
    SigningError,
    StorageCorruptError,
    StorageNotFoundError,
    UnknownCurrencyError,
    UnknownNetworkError,
    WalletError,
)
from multiwallet.wallet.service import MultiWallet

__all__ = [
    "AddressDecodeError",
    "AmountTooSmallError",
    "ConfigError",
    "DecryptionFailedError",
    "DerivationFailedError",
    "FeePolicy",
    "GasEstimationError",
    "InsufficientFundsError",
    "InvalidAmountError",
    "InvalidMnemonicError",
    "InvalidPathComponentError",
    "MultiWallet",
    "NetworkRequestError",
    "ProviderInfo",
    "ProviderType",
    "ScriptBuildError",
    "SerializationError",
    "SigningError",
    "StorageCorruptError",
    "StorageNotFoundError",
    "UnknownCurrencyError",
    "UnknownNetworkError",
    "WalletConfig",
    "WalletError",
    "load_config",
]
