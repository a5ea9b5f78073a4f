"""
Wallet configuration.

The config file is YAML; its structure is validated with pydantic:

    network: testnet
    seed_file: seed.dat
    providers:
      - currency: BTC
        provider_type: BtcProvider
        service_url: https://mempool.space/signet
        derivation_path: "m/84'/1'/0'/0/0"
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from multiwallet.constants import (
    DEFAULT_SATS_PER_VBYTE,
    ERC20_FALLBACK_GAS,
    ERC20_FEE_CAP_BUFFER_PERCENT,
    ERC20_GAS_BUFFER_PERCENT,
    ETH_TRANSFER_GAS,
)
from multiwallet.errors import ConfigError, InvalidPathComponentError
from multiwallet.wallet.bip32 import parse_path

DEFAULT_CONFIG_FILE = Path("config.yaml")


class ProviderType(str, Enum):
    BITCOIN = "BtcProvider"
    ETHEREUM = "EthProvider"
    ETHEREUM_TOKEN = "EthTokenProvider"


class FeePolicy(BaseModel):
    """Static fee and gas policy. Percentages are applied as value * pct // 100."""

    btc_sats_per_vbyte: int = Field(default=DEFAULT_SATS_PER_VBYTE, ge=1)
    eth_transfer_gas: int = Field(default=ETH_TRANSFER_GAS, ge=21_000)
    erc20_fallback_gas: int = Field(default=ERC20_FALLBACK_GAS, ge=21_000)
    erc20_fee_cap_buffer_percent: int = Field(default=ERC20_FEE_CAP_BUFFER_PERCENT, ge=100)
    erc20_gas_buffer_percent: int = Field(default=ERC20_GAS_BUFFER_PERCENT, ge=100)

    model_config = {"frozen": True}


class ProviderInfo(BaseModel):
    currency: str = Field(..., min_length=1)
    provider_type: ProviderType
    service_url: str = Field(..., min_length=1)
    token_address: str | None = None
    derivation_path: str

    model_config = {"frozen": True}

    @field_validator("derivation_path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        try:
            parse_path(v)
        except InvalidPathComponentError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def validate_token_address(self) -> ProviderInfo:
        if self.provider_type == ProviderType.ETHEREUM_TOKEN and not self.token_address:
            raise ValueError(f"token_address is required for {self.currency}")
        return self


class WalletConfig(BaseModel):
    # Checked when the wallet is opened, so unknown networks fail with
    # UnknownNetworkError rather than a validation error
    network: str = "mainnet"
    proxy_url: str | None = None
    seed_file: Path = Path("seed.dat")
    fees: FeePolicy = Field(default_factory=FeePolicy)
    providers: list[ProviderInfo] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_unique_currencies(self) -> WalletConfig:
        currencies = [p.currency for p in self.providers]
        duplicates = {c for c in currencies if currencies.count(c) > 1}
        if duplicates:
            raise ValueError(f"Duplicate currencies in config: {sorted(duplicates)}")
        return self


class CliSettings(BaseSettings):
    """Environment defaults for the command line (MULTIWALLET_CONFIG etc.)."""

    model_config = SettingsConfigDict(env_prefix="MULTIWALLET_", case_sensitive=False)

    config: Path = DEFAULT_CONFIG_FILE
    password: str = ""
    log_level: str = "INFO"


def load_config(path: Path | str = DEFAULT_CONFIG_FILE) -> WalletConfig:
    """Read and validate a YAML wallet config."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    try:
        return WalletConfig.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
