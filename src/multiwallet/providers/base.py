"""
Chain provider interface and amount helpers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation, localcontext
from typing import ClassVar

from multiwallet.config import ProviderType
from multiwallet.errors import InvalidAmountError
from multiwallet.wallet.bip32 import HDKey

Amount = Decimal | str | int


def to_decimal(amount: Amount) -> Decimal:
    """Parse a human-entered amount; it must be finite and positive."""
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except InvalidOperation as e:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from e

    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(f"Amount must be a positive number: {amount!r}")
    return value


def to_base_units(amount: Amount, decimals: int) -> int:
    """
    Scale a human amount to integer base units (satoshis, wei, token units).

    Exact decimal shift, digits beyond `decimals` are truncated.
    """
    value = to_decimal(amount)
    with localcontext() as ctx:
        ctx.prec = 200
        units = int(value.scaleb(decimals))

    if units <= 0:
        raise InvalidAmountError(f"Amount {amount} is below the smallest unit")
    return units


def from_base_units(units: int, decimals: int) -> float:
    """Display conversion, integer base units to a float of whole units."""
    return units / 10**decimals


class ChainProvider(ABC):
    """
    Per-currency wallet capability set.

    Each provider owns exactly one leaf key derived for it at construction.
    """

    provider_type: ClassVar[ProviderType]

    def __init__(self, key: HDKey):
        self.key = key

    @abstractmethod
    def get_address(self) -> str:
        """Receive address of the provider key"""

    @abstractmethod
    def get_balance(self) -> float:
        """Balance in whole units (display only)"""

    @abstractmethod
    def send(self, address: str, amount: Amount) -> str:
        """Build, sign and broadcast a transfer, returns the transaction id"""

    def close(self) -> None:
        pass
