"""
Wallet data models.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class UTXOInfo:
    """Unspent output of the wallet address as reported by the data provider"""

    txid: str
    vout: int
    value: int
    confirmed: bool = False
    block_height: int | None = None


@dataclass
class CoinSelection:
    """Result of coin selection"""

    utxos: list[UTXOInfo]
    total_value: int
    change_value: int
    fee: int


@dataclass
class UtxoContext:
    """
    Coin-selection context for a Bitcoin provider.

    Holds the last UTXO set fetched for the wallet address. A caller that
    wants explicit control over staleness owns one of these and passes it
    to get_balance()/send(); otherwise the provider uses its own. The lock
    serializes sends that share the same context.
    """

    utxos: list[UTXOInfo] = field(default_factory=list)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.utxos

    def update(self, utxos: list[UTXOInfo]) -> None:
        self.utxos = list(utxos)

    def invalidate(self) -> None:
        self.utxos = []
