"""
EIP-1559 fee market parameters.

All arithmetic is on integers (wei, gas units); percentage buffers are
applied as value * pct // 100.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from multiwallet.backends.base import EthereumBackend
from multiwallet.config import FeePolicy
from multiwallet.errors import GasEstimationError


def apply_percent(value: int, percent: int) -> int:
    return value * percent // 100


def compute_fee_cap(base_fee: int, priority_fee: int, buffer_percent: int = 100) -> int:
    """Max fee per gas: (base fee + tip), optionally scaled by a buffer percentage."""
    return apply_percent(base_fee + priority_fee, buffer_percent)


@dataclass(frozen=True)
class FeeQuote:
    """Account and fee parameters for one dynamic-fee transaction."""

    nonce: int
    chain_id: int
    max_priority_fee: int
    max_fee: int


class FeeMarketEstimator:
    def __init__(self, backend: EthereumBackend, fees: FeePolicy | None = None):
        self.backend = backend
        self.fees = fees or FeePolicy()

    def quote(self, sender: str, fee_cap_buffer_percent: int = 100) -> FeeQuote:
        nonce = self.backend.get_pending_nonce(sender)
        chain_id = self.backend.get_chain_id()
        tip = self.backend.get_max_priority_fee()
        base_fee = self.backend.get_base_fee()

        max_fee = compute_fee_cap(base_fee, tip, fee_cap_buffer_percent)
        logger.debug(
            f"Fee quote: nonce={nonce} chain_id={chain_id} base_fee={base_fee} "
            f"tip={tip} max_fee={max_fee}"
        )
        return FeeQuote(nonce=nonce, chain_id=chain_id, max_priority_fee=tip, max_fee=max_fee)

    def native_transfer_quote(self, sender: str) -> FeeQuote:
        return self.quote(sender)

    def token_transfer_quote(self, sender: str) -> FeeQuote:
        return self.quote(sender, self.fees.erc20_fee_cap_buffer_percent)

    def token_gas_limit(self, call: dict[str, Any]) -> int:
        """
        Gas limit for a contract call: the node's estimate, or the fallback
        when estimation fails, plus the configured buffer.
        """
        try:
            gas = self.backend.estimate_gas(call)
        except GasEstimationError as e:
            gas = self.fees.erc20_fallback_gas
            logger.warning(f"{e}; using fallback gas limit {gas}")

        return apply_percent(gas, self.fees.erc20_gas_buffer_percent)
