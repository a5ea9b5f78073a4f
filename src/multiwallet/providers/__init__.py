"""
Chain providers.

The provider set is closed: every ProviderType maps to exactly one class.
"""

from __future__ import annotations

from multiwallet.config import FeePolicy, ProviderInfo, ProviderType
from multiwallet.errors import ConfigError
from multiwallet.providers.base import ChainProvider
from multiwallet.providers.bitcoin import BitcoinProvider
from multiwallet.providers.ethereum import EthereumProvider, EthereumTokenProvider
from multiwallet.wallet.bip32 import HDKey


def create_provider(
    info: ProviderInfo,
    key: HDKey,
    network: str,
    fees: FeePolicy | None = None,
    proxy_url: str | None = None,
) -> ChainProvider:
    """Build the provider for one configured currency."""
    from multiwallet.backends import EthereumRpcBackend, MempoolBackend

    fees = fees or FeePolicy()

    if info.provider_type == ProviderType.BITCOIN:
        return BitcoinProvider(
            key, MempoolBackend(info.service_url, proxy_url=proxy_url), network, fees
        )
    elif info.provider_type == ProviderType.ETHEREUM:
        return EthereumProvider(key, EthereumRpcBackend(info.service_url, proxy_url), fees)
    elif info.provider_type == ProviderType.ETHEREUM_TOKEN:
        if not info.token_address:
            raise ConfigError(f"token_address is required for {info.currency}")
        return EthereumTokenProvider(
            key, EthereumRpcBackend(info.service_url, proxy_url), info.token_address, fees
        )

    raise ValueError(f"Unsupported provider type: {info.provider_type}")


__all__ = [
    "BitcoinProvider",
    "ChainProvider",
    "EthereumProvider",
    "EthereumTokenProvider",
    "create_provider",
]
