"""
Bitcoin P2WPKH provider.

Coin selection is largest-first greedy: UTXOs are sorted by value and
accumulated until the running sum covers the requested amount. This is not
fee-optimal (it may add more inputs than needed or leave small coins unused)
but it is deterministic and easy to audit.

The fee is computed analytically from the P2WPKH input/output sizes for a
two-output (recipient + change) transaction at a static sat/vbyte rate.
"""

from __future__ import annotations

from loguru import logger

from multiwallet.backends.base import BitcoinBackend
from multiwallet.config import FeePolicy, ProviderType
from multiwallet.constants import (
    BITCOIN_DECIMALS,
    P2WPKH_INPUT_BASE_SIZE,
    P2WPKH_OUTPUT_SIZE,
    P2WPKH_WITNESS_SIZE,
    SEGWIT_MARKER_FLAG_SIZE,
    STANDARD_DUST_LIMIT,
)
from multiwallet.errors import AmountTooSmallError
from multiwallet.providers.base import Amount, ChainProvider, from_base_units, to_base_units
from multiwallet.wallet.address import pubkey_to_p2wpkh_address
from multiwallet.wallet.bip32 import HDKey
from multiwallet.wallet.models import CoinSelection, UTXOInfo, UtxoContext
from multiwallet.wallet.signing import sign_p2wpkh_transaction
from multiwallet.wallet.tx_builder import Transaction, build_unsigned_tx, varint

# Recipient + change
TX_OUTPUT_COUNT = 2


def estimate_vsize(num_inputs: int, num_outputs: int) -> int:
    """Estimate vsize for a transaction with only P2WPKH inputs and outputs."""
    non_witness = (
        4  # version
        + len(varint(num_inputs))
        + num_inputs * P2WPKH_INPUT_BASE_SIZE
        + len(varint(num_outputs))
        + num_outputs * P2WPKH_OUTPUT_SIZE
        + 4  # locktime
    )

    witness = SEGWIT_MARKER_FLAG_SIZE if num_inputs > 0 else 0
    witness += num_inputs * P2WPKH_WITNESS_SIZE

    weight = 4 * non_witness + witness
    return (weight + 3) // 4


def estimate_fee(num_inputs: int, num_outputs: int, sats_per_vbyte: int) -> int:
    return estimate_vsize(num_inputs, num_outputs) * sats_per_vbyte


def select_utxos(utxos: list[UTXOInfo], target_amount: int) -> tuple[list[UTXOInfo], int]:
    """
    Largest-first greedy selection.

    Returns the selected UTXOs in selection order and their sum. If the
    target cannot be reached every UTXO is returned; the caller decides
    whether the sum is enough.
    """
    selected: list[UTXOInfo] = []
    total = 0

    for utxo in sorted(utxos, key=lambda u: u.value, reverse=True):
        total += utxo.value
        selected.append(utxo)
        if total >= target_amount:
            break

    return selected, total


def plan_spend(utxos: list[UTXOInfo], amount: int, sats_per_vbyte: int) -> CoinSelection:
    """
    Select coins for paying `amount` satoshis and compute fee and change.

    Raises AmountTooSmallError when the selected coins do not cover the
    amount plus the fee with a positive change output.
    """
    selected, total = select_utxos(utxos, amount)
    fee = estimate_fee(len(selected), TX_OUTPUT_COUNT, sats_per_vbyte)

    if amount >= total - fee:
        raise AmountTooSmallError(
            f"Insufficient funds: need {amount} + {fee} fee, have {total} sats "
            f"in {len(selected)} UTXOs"
        )

    return CoinSelection(
        utxos=selected, total_value=total, change_value=total - amount - fee, fee=fee
    )


class BitcoinProvider(ChainProvider):
    """
    Single-key native segwit wallet.

    All UTXOs of the provider address are assumed to be spendable by the
    provider key.
    """

    provider_type = ProviderType.BITCOIN

    def __init__(
        self,
        key: HDKey,
        backend: BitcoinBackend,
        network: str = "mainnet",
        fees: FeePolicy | None = None,
    ):
        super().__init__(key)
        self.backend = backend
        self.network = network
        self.fees = fees or FeePolicy()
        self.utxo_context = UtxoContext()

    def get_address(self) -> str:
        return pubkey_to_p2wpkh_address(self.key.get_public_key_bytes(), self.network)

    def refresh_utxos(self, context: UtxoContext | None = None) -> list[UTXOInfo]:
        """Fetch the UTXO set of the provider address into the context."""
        context = context if context is not None else self.utxo_context
        utxos = self.backend.get_utxos(self.get_address())
        context.update(utxos)
        return context.utxos

    def get_balance(self, context: UtxoContext | None = None) -> float:
        utxos = self.refresh_utxos(context)
        return from_base_units(sum(u.value for u in utxos), BITCOIN_DECIMALS)

    def build_transaction(
        self, address: str, amount: Amount, context: UtxoContext | None = None
    ) -> tuple[Transaction, CoinSelection]:
        """
        Select coins, build and sign a transaction paying `amount` BTC to address.

        Nothing is broadcast. The UTXO set is fetched once if the context is
        empty.
        """
        context = context if context is not None else self.utxo_context
        amount_sats = to_base_units(amount, BITCOIN_DECIMALS)

        if context.is_empty:
            self.refresh_utxos(context)

        selection = plan_spend(context.utxos, amount_sats, self.fees.btc_sats_per_vbyte)
        logger.debug(
            f"Selected {len(selection.utxos)} UTXOs totalling {selection.total_value} sats, "
            f"fee {selection.fee} sats, change {selection.change_value} sats"
        )
        if selection.change_value < STANDARD_DUST_LIMIT:
            logger.warning(
                f"Change output of {selection.change_value} sats is below the dust limit"
            )

        destinations = [
            (address, amount_sats),
            (self.get_address(), selection.change_value),
        ]
        tx = build_unsigned_tx(selection.utxos, destinations, self.network)
        sign_p2wpkh_transaction(tx, self.key.private_key)

        return tx, selection

    def send(self, address: str, amount: Amount, context: UtxoContext | None = None) -> str:
        context = context if context is not None else self.utxo_context

        with context.lock:
            tx, selection = self.build_transaction(address, amount, context)
            tx_hex = tx.serialize().hex()
            logger.debug(f"Signed transaction {tx.txid()} ({len(tx_hex) // 2} bytes)")

            logger.info(
                f"Sending {amount} BTC to {address} "
                f"({len(tx.inputs)} inputs, fee {selection.fee} sats)"
            )
            txid = self.backend.broadcast_transaction(tx_hex)

            # Spent coins must not be selected again
            context.invalidate()

        return txid

    def close(self) -> None:
        self.backend.close()
