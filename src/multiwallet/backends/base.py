"""
Blockchain backend interfaces.

Providers never talk to the network directly; they go through one of these
so that transaction construction can be exercised without a live node.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from multiwallet.wallet.models import UTXOInfo


class BitcoinBackend(ABC):
    """Address-indexed Bitcoin data provider (Esplora style)."""

    @abstractmethod
    def get_utxos(self, address: str) -> list[UTXOInfo]:
        """Get UTXOs for the given address"""

    @abstractmethod
    def broadcast_transaction(self, tx_hex: str) -> str:
        """Broadcast transaction, returns txid"""

    def close(self) -> None:
        """Close backend connection"""
        pass


class EthereumBackend(ABC):
    """Ethereum JSON-RPC operations used by the wallet."""

    @abstractmethod
    def get_balance(self, address: str) -> int:
        """Balance in wei at the latest block"""

    @abstractmethod
    def get_pending_nonce(self, address: str) -> int:
        """Transaction count including pending transactions"""

    @abstractmethod
    def get_chain_id(self) -> int:
        """Chain id used for replay-protected signing"""

    @abstractmethod
    def get_max_priority_fee(self) -> int:
        """Suggested priority tip in wei"""

    @abstractmethod
    def get_base_fee(self) -> int:
        """Base fee per gas of the latest block in wei"""

    @abstractmethod
    def estimate_gas(self, tx: dict[str, Any]) -> int:
        """Simulate tx and return the gas it uses. Raises GasEstimationError."""

    @abstractmethod
    def call(self, to: str, data: bytes) -> bytes:
        """Read-only contract call at the latest block"""

    @abstractmethod
    def send_raw_transaction(self, raw_tx: bytes) -> str:
        """Broadcast a signed transaction, returns the 0x-prefixed hash"""

    def close(self) -> None:
        """Close backend connection"""
        pass
