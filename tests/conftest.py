"""
Shared fixtures for wallet tests.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from multiwallet.backends.base import BitcoinBackend, EthereumBackend
from multiwallet.wallet.bip32 import HDKey
from multiwallet.wallet.seed import mnemonic_to_seed


@pytest.fixture
def sample_mnemonic() -> str:
    """Test mnemonic (not for production use!)."""
    return (
        "abandon abandon abandon abandon abandon abandon "
        "abandon abandon abandon abandon abandon about"
    )


@pytest.fixture
def master_key(sample_mnemonic: str) -> HDKey:
    return HDKey.from_seed(mnemonic_to_seed(sample_mnemonic))


@pytest.fixture
def btc_key(master_key: HDKey) -> HDKey:
    return master_key.derive("m/84'/0'/0'/0/0")


@pytest.fixture
def eth_key(master_key: HDKey) -> HDKey:
    return master_key.derive("m/44'/60'/0'/0/0")


@pytest.fixture
def btc_backend() -> MagicMock:
    backend = MagicMock(spec=BitcoinBackend)
    backend.get_utxos.return_value = []
    backend.broadcast_transaction.return_value = "ab" * 32
    return backend


@pytest.fixture
def eth_backend() -> MagicMock:
    backend = MagicMock(spec=EthereumBackend)
    backend.get_pending_nonce.return_value = 7
    backend.get_chain_id.return_value = 11155111
    backend.get_max_priority_fee.return_value = 10
    backend.get_base_fee.return_value = 100
    backend.send_raw_transaction.return_value = "0x" + "cd" * 32
    return backend
