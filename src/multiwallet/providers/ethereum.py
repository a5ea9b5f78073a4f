"""
Ethereum and ERC-20 providers.

Transfers are EIP-1559 (type 2) transactions signed locally with the
provider key via eth-account and broadcast with eth_sendRawTransaction.
"""

from __future__ import annotations

from typing import Any

from eth_account import Account
from loguru import logger
from web3 import Web3

from multiwallet.backends.base import EthereumBackend
from multiwallet.config import FeePolicy, ProviderType
from multiwallet.constants import ETHER_DECIMALS
from multiwallet.errors import AddressDecodeError, SigningError
from multiwallet.providers import erc20
from multiwallet.providers.base import Amount, ChainProvider, from_base_units, to_base_units
from multiwallet.providers.fee_market import FeeMarketEstimator, FeeQuote
from multiwallet.wallet.bip32 import HDKey

DYNAMIC_FEE_TX_TYPE = 2


def to_checksum(address: str) -> str:
    """Validate a hex address and return its checksummed form."""
    if not Web3.is_address(address):
        raise AddressDecodeError(f"Invalid Ethereum address: {address}")
    return Web3.to_checksum_address(address)


class EthereumProvider(ChainProvider):
    """Native ETH transfers with a fixed 21000 gas limit."""

    provider_type = ProviderType.ETHEREUM

    def __init__(self, key: HDKey, backend: EthereumBackend, fees: FeePolicy | None = None):
        super().__init__(key)
        self.backend = backend
        self.fees = fees or FeePolicy()
        self.fee_market = FeeMarketEstimator(backend, self.fees)
        self._account = Account.from_key(key.get_private_key_bytes())

    def get_address(self) -> str:
        return self._account.address

    def get_balance(self) -> float:
        return from_base_units(self.backend.get_balance(self.get_address()), ETHER_DECIMALS)

    def build_transaction(
        self, quote: FeeQuote, to: str, value: int, gas: int, data: bytes = b""
    ) -> dict[str, Any]:
        return {
            "type": DYNAMIC_FEE_TX_TYPE,
            "chainId": quote.chain_id,
            "nonce": quote.nonce,
            "maxPriorityFeePerGas": quote.max_priority_fee,
            "maxFeePerGas": quote.max_fee,
            "gas": gas,
            "to": to,
            "value": value,
            "data": data,
        }

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        """Sign a transaction dict, returning the raw typed-transaction bytes."""
        try:
            signed = self._account.sign_transaction(tx)
        except (TypeError, ValueError) as e:
            raise SigningError(f"Failed to sign transaction: {e}") from e
        return bytes(signed.raw_transaction)

    def _sign_and_send(self, tx: dict[str, Any]) -> str:
        raw_tx = self.sign_transaction(tx)
        tx_hash = self.backend.send_raw_transaction(raw_tx)
        logger.info(f"Broadcast transaction {tx_hash}")
        return tx_hash

    def send(self, address: str, amount: Amount) -> str:
        to = to_checksum(address)
        value = to_base_units(amount, ETHER_DECIMALS)

        quote = self.fee_market.native_transfer_quote(self.get_address())
        tx = self.build_transaction(quote, to, value, self.fees.eth_transfer_gas)

        logger.info(f"Sending {amount} ETH to {to}")
        return self._sign_and_send(tx)

    def close(self) -> None:
        self.backend.close()


class EthereumTokenProvider(EthereumProvider):
    """ERC-20 transfers; amounts are scaled by the token's own decimals."""

    provider_type = ProviderType.ETHEREUM_TOKEN

    def __init__(
        self,
        key: HDKey,
        backend: EthereumBackend,
        token_address: str,
        fees: FeePolicy | None = None,
    ):
        super().__init__(key, backend, fees)
        self.token_address = to_checksum(token_address)

    def token_decimals(self) -> int:
        return erc20.decode_uint(self.backend.call(self.token_address, erc20.encode_decimals()), 8)

    def token_symbol(self) -> str:
        return erc20.decode_string(self.backend.call(self.token_address, erc20.encode_symbol()))

    def get_raw_balance(self) -> int:
        data = erc20.encode_balance_of(self.get_address())
        return erc20.decode_uint(self.backend.call(self.token_address, data))

    def get_balance(self) -> float:
        balance = self.get_raw_balance()
        return from_base_units(balance, self.token_decimals())

    def send(self, address: str, amount: Amount) -> str:
        to = to_checksum(address)
        decimals = self.token_decimals()
        token_amount = to_base_units(amount, decimals)
        data = erc20.encode_transfer(to, token_amount)

        sender = self.get_address()
        quote = self.fee_market.token_transfer_quote(sender)

        gas = self.fee_market.token_gas_limit(
            {
                "from": sender,
                "to": self.token_address,
                "data": Web3.to_hex(data),
                "maxFeePerGas": quote.max_fee,
                "maxPriorityFeePerGas": quote.max_priority_fee,
            }
        )
        tx = self.build_transaction(quote, self.token_address, 0, gas, data)

        logger.info(f"Sending {amount} ({token_amount} units) of {self.token_address} to {to}")
        return self._sign_and_send(tx)
