"""
Wallet error hierarchy.

Every failure in seed handling, key derivation and transaction construction
is raised as a WalletError subclass so callers can abort the current
operation without losing the cause chain.
"""

from __future__ import annotations


class WalletError(Exception):
    """Base class for all wallet errors."""

    pass


class ConfigError(WalletError):
    pass


class InvalidMnemonicError(WalletError):
    pass


class StorageNotFoundError(WalletError):
    pass


class StorageCorruptError(WalletError):
    pass


class DecryptionFailedError(WalletError):
    """Seed authentication tag did not verify (wrong password or corrupted data)."""

    pass


class InvalidPathComponentError(WalletError):
    pass


class DerivationFailedError(WalletError):
    pass


class UnknownCurrencyError(WalletError):
    pass


class UnknownNetworkError(WalletError):
    pass


class InvalidAmountError(WalletError):
    pass


class InsufficientFundsError(WalletError):
    pass


class AmountTooSmallError(InsufficientFundsError):
    """Requested amount is not covered by the selected coins once the fee is paid."""

    pass


class AddressDecodeError(WalletError):
    pass


class ScriptBuildError(WalletError):
    pass


class NetworkRequestError(WalletError):
    """HTTP or JSON-RPC request to a blockchain data provider failed."""

    pass


class GasEstimationError(NetworkRequestError):
    pass


class SigningError(WalletError):
    pass


class SerializationError(WalletError):
    pass
