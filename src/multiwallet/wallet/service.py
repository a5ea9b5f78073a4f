"""
Multi-currency wallet service.
"""

from __future__ import annotations

from loguru import logger

from multiwallet.config import WalletConfig
from multiwallet.errors import UnknownCurrencyError, UnknownNetworkError
from multiwallet.providers import ChainProvider, create_provider
from multiwallet.providers.base import Amount
from multiwallet.wallet.bip32 import HDKey
from multiwallet.wallet.seed import SeedVault, unseal

SUPPORTED_NETWORKS = ("mainnet", "testnet")


def check_network(network: str) -> str:
    if network not in SUPPORTED_NETWORKS:
        raise UnknownNetworkError(f"Unknown network: {network}")
    return network


class MultiWallet:
    """
    Routing table from currency label to chain provider.

    The master key is derived once from the seed; every configured provider
    gets its own leaf key from its derivation path.
    """

    def __init__(self, master_key: HDKey, providers: dict[str, ChainProvider]):
        self.master_key = master_key
        self.providers = providers

    @classmethod
    def from_config(
        cls,
        config: WalletConfig,
        password: str = "",
        vault: SeedVault | None = None,
    ) -> MultiWallet:
        network = check_network(config.network)

        vault = vault or SeedVault(config.seed_file)
        seed = unseal(vault.load(), password)
        master_key = HDKey.from_seed(seed)

        providers: dict[str, ChainProvider] = {}
        for info in config.providers:
            key = master_key.derive(info.derivation_path)
            providers[info.currency] = create_provider(
                info, key, network, config.fees, config.proxy_url
            )
            logger.debug(
                f"Configured {info.currency} ({info.provider_type.value}) "
                f"at {info.derivation_path}"
            )

        logger.info(f"Initialized wallet on {network} with {len(providers)} providers")
        return cls(master_key, providers)

    def currencies(self) -> list[str]:
        return list(self.providers)

    def get_provider(self, currency: str) -> ChainProvider:
        try:
            return self.providers[currency]
        except KeyError:
            raise UnknownCurrencyError(f"Unknown currency: {currency}") from None

    def get_address(self, currency: str) -> str:
        return self.get_provider(currency).get_address()

    def get_balance(self, currency: str) -> float:
        return self.get_provider(currency).get_balance()

    def send(self, currency: str, address: str, amount: Amount) -> str:
        return self.get_provider(currency).send(address, amount)

    def close(self) -> None:
        for provider in self.providers.values():
            provider.close()
