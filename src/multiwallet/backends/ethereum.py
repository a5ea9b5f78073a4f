"""
Ethereum JSON-RPC backend built on web3.py.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from loguru import logger
from web3 import Web3
from web3.exceptions import Web3Exception

from multiwallet.backends.base import EthereumBackend
from multiwallet.constants import DEFAULT_HTTP_TIMEOUT
from multiwallet.errors import GasEstimationError, NetworkRequestError

T = TypeVar("T")

# Transport failures surface as OSError (requests) and RPC errors as
# Web3Exception or ValueError depending on the web3 version
RPC_ERRORS = (Web3Exception, ValueError, OSError)


class EthereumRpcBackend(EthereumBackend):
    def __init__(
        self,
        rpc_url: str,
        proxy_url: str | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        w3: Web3 | None = None,
    ):
        self.rpc_url = rpc_url
        if w3 is None:
            request_kwargs: dict[str, Any] = {"timeout": timeout}
            if proxy_url:
                request_kwargs["proxies"] = {"http": proxy_url, "https": proxy_url}
            w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs=request_kwargs))
        self.w3 = w3

    def _rpc(self, what: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except RPC_ERRORS as e:
            logger.error(f"RPC call failed: {what} - {e}")
            raise NetworkRequestError(f"Failed to get {what}: {e}") from e

    def get_balance(self, address: str) -> int:
        checksum = Web3.to_checksum_address(address)
        return int(self._rpc("balance", lambda: self.w3.eth.get_balance(checksum)))

    def get_pending_nonce(self, address: str) -> int:
        return int(
            self._rpc(
                "nonce",
                lambda: self.w3.eth.get_transaction_count(
                    Web3.to_checksum_address(address), "pending"
                ),
            )
        )

    def get_chain_id(self) -> int:
        return int(self._rpc("chain ID", lambda: self.w3.eth.chain_id))

    def get_max_priority_fee(self) -> int:
        return int(self._rpc("gas tip cap", lambda: self.w3.eth.max_priority_fee))

    def get_base_fee(self) -> int:
        block = self._rpc("latest block", lambda: self.w3.eth.get_block("latest"))
        base_fee = block.get("baseFeePerGas")
        if base_fee is None:
            raise NetworkRequestError("Latest block has no base fee (pre-London chain?)")
        return int(base_fee)

    def estimate_gas(self, tx: dict[str, Any]) -> int:
        try:
            return int(self.w3.eth.estimate_gas(tx))
        except RPC_ERRORS as e:
            raise GasEstimationError(f"Gas estimation failed: {e}") from e

    def call(self, to: str, data: bytes) -> bytes:
        result = self._rpc(
            "contract call",
            lambda: self.w3.eth.call({"to": Web3.to_checksum_address(to), "data": data}),
        )
        return bytes(result)

    def send_raw_transaction(self, raw_tx: bytes) -> str:
        tx_hash = self._rpc(
            "transaction broadcast", lambda: self.w3.eth.send_raw_transaction(raw_tx)
        )
        return Web3.to_hex(tx_hash)

