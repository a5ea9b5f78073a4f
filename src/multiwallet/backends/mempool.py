"""
Esplora (mempool.space / blockstream.info) REST backend.
"""

from __future__ import annotations

import httpx
from loguru import logger

from multiwallet.backends.base import BitcoinBackend
from multiwallet.constants import DEFAULT_HTTP_TIMEOUT
from multiwallet.errors import NetworkRequestError
from multiwallet.wallet.models import UTXOInfo


class MempoolBackend(BitcoinBackend):
    """
    Blockchain backend using an Esplora-compatible REST API.

    service_url is the site root (e.g. https://mempool.space/signet); the
    API lives under /api.
    """

    def __init__(
        self,
        service_url: str,
        proxy_url: str | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = service_url.rstrip("/") + "/api"
        self.client = httpx.Client(timeout=timeout, proxy=proxy_url, transport=transport)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Request failed: {method} {url} - {e}")
            raise NetworkRequestError(f"Request to {url} failed: {e}") from e

        if response.status_code != 200:
            raise NetworkRequestError(
                f"API request failed: {response.status_code} - {response.text}"
            )
        return response

    def get_utxos(self, address: str) -> list[UTXOInfo]:
        response = self._request("GET", f"/address/{address}/utxo")

        try:
            utxos = [
                UTXOInfo(
                    txid=entry["txid"],
                    vout=int(entry["vout"]),
                    value=int(entry["value"]),
                    confirmed=bool(entry.get("status", {}).get("confirmed", False)),
                    block_height=entry.get("status", {}).get("block_height"),
                )
                for entry in response.json()
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise NetworkRequestError(f"Failed to decode UTXO response: {e}") from e

        logger.debug(f"Fetched {len(utxos)} UTXOs for {address}")
        return utxos

    def broadcast_transaction(self, tx_hex: str) -> str:
        response = self._request(
            "POST", "/tx", content=tx_hex, headers={"Content-Type": "text/plain"}
        )
        txid = response.text.strip()
        logger.info(f"Broadcast transaction {txid}")
        return txid

    def close(self) -> None:
        self.client.close()
