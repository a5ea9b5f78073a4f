"""
Tests for the Ethereum and ERC-20 providers.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from eth_abi import decode, encode
from eth_account import Account

from multiwallet.config import FeePolicy
from multiwallet.errors import (
    AddressDecodeError,
    GasEstimationError,
    InvalidAmountError,
    NetworkRequestError,
    SerializationError,
)
from multiwallet.providers import erc20
from multiwallet.providers.ethereum import EthereumProvider, EthereumTokenProvider
from multiwallet.providers.fee_market import (
    FeeMarketEstimator,
    apply_percent,
    compute_fee_cap,
)

RECIPIENT = "0x000000000000000000000000000000000000dead"
TOKEN = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"


def token_call(to, data):
    """Fake contract with 6 decimals and a balance of 2.5 tokens."""
    if data == erc20.DECIMALS_SELECTOR:
        return encode(["uint8"], [6])
    if data == erc20.SYMBOL_SELECTOR:
        return encode(["string"], ["USDC"])
    if data.startswith(erc20.BALANCE_OF_SELECTOR):
        return encode(["uint256"], [2_500_000])
    raise AssertionError(f"unexpected call data {data.hex()}")


@pytest.fixture
def eth_provider(eth_key, eth_backend):
    return EthereumProvider(eth_key, eth_backend)


@pytest.fixture
def token_provider(eth_key, eth_backend):
    eth_backend.call.side_effect = token_call
    eth_backend.estimate_gas.return_value = 50_000
    return EthereumTokenProvider(eth_key, eth_backend, TOKEN)


class TestFeeMarket:
    def test_fee_cap(self):
        assert compute_fee_cap(100, 10) == 110
        assert compute_fee_cap(100, 10, 125) == 137

    def test_apply_percent_floors(self):
        assert apply_percent(65_000, 120) == 78_000
        assert apply_percent(7, 150) == 10

    def test_native_quote(self, eth_backend):
        quote = FeeMarketEstimator(eth_backend).native_transfer_quote(RECIPIENT)
        assert quote.nonce == 7
        assert quote.chain_id == 11155111
        assert quote.max_priority_fee == 10
        assert quote.max_fee == 110
        eth_backend.get_pending_nonce.assert_called_once_with(RECIPIENT)

    def test_token_quote_uses_buffer(self, eth_backend):
        fees = FeePolicy(erc20_fee_cap_buffer_percent=150)
        quote = FeeMarketEstimator(eth_backend, fees).token_transfer_quote(RECIPIENT)
        assert quote.max_fee == 165

    def test_gas_limit_buffered(self, eth_backend):
        eth_backend.estimate_gas.return_value = 50_000
        assert FeeMarketEstimator(eth_backend).token_gas_limit({}) == 60_000

    def test_gas_limit_fallback(self, eth_backend):
        eth_backend.estimate_gas.side_effect = GasEstimationError("execution reverted")
        assert FeeMarketEstimator(eth_backend).token_gas_limit({}) == 78_000

    def test_other_errors_propagate(self, eth_backend):
        eth_backend.estimate_gas.side_effect = NetworkRequestError("connection refused")
        with pytest.raises(NetworkRequestError):
            FeeMarketEstimator(eth_backend).token_gas_limit({})


class TestERC20Encoding:
    def test_selectors(self):
        assert erc20.TRANSFER_SELECTOR.hex() == "a9059cbb"
        assert erc20.BALANCE_OF_SELECTOR.hex() == "70a08231"
        assert erc20.DECIMALS_SELECTOR.hex() == "313ce567"
        assert erc20.SYMBOL_SELECTOR.hex() == "95d89b41"

    def test_transfer(self):
        data = erc20.encode_transfer(RECIPIENT, 1_500_000)
        assert len(data) == 4 + 64
        to, amount = decode(["address", "uint256"], data[4:])
        assert to.lower() == RECIPIENT
        assert amount == 1_500_000

    def test_transfer_amount_out_of_range(self):
        with pytest.raises(SerializationError):
            erc20.encode_transfer(RECIPIENT, 2**256)

    def test_decode(self):
        assert erc20.decode_uint(encode(["uint8"], [18]), 8) == 18
        assert erc20.decode_string(encode(["string"], ["DAI"])) == "DAI"

    def test_decode_short_data(self):
        with pytest.raises(SerializationError):
            erc20.decode_uint(b"")


class TestEthereumProvider:
    def test_address(self, eth_provider):
        assert eth_provider.get_address() == "0x9858EfFD232B4033E47d90003D41EC34EcaEda94"

    def test_balance(self, eth_provider, eth_backend):
        eth_backend.get_balance.return_value = 1_500_000_000_000_000_000
        assert eth_provider.get_balance() == 1.5

    def test_send(self, eth_provider, eth_backend):
        with patch.object(
            eth_provider, "sign_transaction", wraps=eth_provider.sign_transaction
        ) as sign:
            tx_hash = eth_provider.send(RECIPIENT, "1.5")

        assert tx_hash == "0x" + "cd" * 32
        tx = sign.call_args[0][0]
        assert tx["type"] == 2
        assert tx["chainId"] == 11155111
        assert tx["nonce"] == 7
        assert tx["gas"] == 21_000
        assert tx["maxPriorityFeePerGas"] == 10
        assert tx["maxFeePerGas"] == 110
        assert tx["value"] == 1_500_000_000_000_000_000
        assert tx["to"] == "0x000000000000000000000000000000000000dEaD"

        raw_tx = eth_backend.send_raw_transaction.call_args[0][0]
        assert raw_tx[0] == 0x02
        assert Account.recover_transaction(raw_tx) == eth_provider.get_address()

    def test_invalid_recipient(self, eth_provider, eth_backend):
        with pytest.raises(AddressDecodeError):
            eth_provider.send("0x1234", "1")
        eth_backend.get_pending_nonce.assert_not_called()
        eth_backend.send_raw_transaction.assert_not_called()

    def test_invalid_amount(self, eth_provider, eth_backend):
        with pytest.raises(InvalidAmountError):
            eth_provider.send(RECIPIENT, "0")
        eth_backend.send_raw_transaction.assert_not_called()

    def test_broadcast_error_propagates(self, eth_provider, eth_backend):
        eth_backend.send_raw_transaction.side_effect = NetworkRequestError("nonce too low")
        with pytest.raises(NetworkRequestError, match="nonce too low"):
            eth_provider.send(RECIPIENT, "1")


class TestEthereumTokenProvider:
    def test_invalid_token_address(self, eth_key, eth_backend):
        with pytest.raises(AddressDecodeError):
            EthereumTokenProvider(eth_key, eth_backend, "not-a-contract")

    def test_metadata(self, token_provider):
        assert token_provider.token_decimals() == 6
        assert token_provider.token_symbol() == "USDC"

    def test_balance(self, token_provider):
        assert token_provider.get_raw_balance() == 2_500_000
        assert token_provider.get_balance() == 2.5

    def test_send(self, token_provider, eth_backend):
        with patch.object(
            token_provider, "sign_transaction", wraps=token_provider.sign_transaction
        ) as sign:
            token_provider.send(RECIPIENT, "1.5")

        tx = sign.call_args[0][0]
        assert tx["to"] == token_provider.token_address
        assert tx["value"] == 0
        assert tx["gas"] == 60_000
        assert tx["maxFeePerGas"] == 137
        assert tx["maxPriorityFeePerGas"] == 10

        assert tx["data"][:4] == erc20.TRANSFER_SELECTOR
        to, amount = decode(["address", "uint256"], tx["data"][4:])
        assert to.lower() == RECIPIENT
        assert amount == 1_500_000

        eth_backend.send_raw_transaction.assert_called_once()

    def test_estimate_call(self, token_provider, eth_backend):
        token_provider.send(RECIPIENT, "1")

        call = eth_backend.estimate_gas.call_args[0][0]
        assert call["from"] == token_provider.get_address()
        assert call["to"] == token_provider.token_address
        assert call["data"].startswith("0xa9059cbb")
        assert call["maxFeePerGas"] == 137

    def test_send_with_fallback_gas(self, token_provider, eth_backend):
        eth_backend.estimate_gas.side_effect = GasEstimationError("execution reverted")
        with patch.object(
            token_provider, "sign_transaction", wraps=token_provider.sign_transaction
        ) as sign:
            token_provider.send(RECIPIENT, "1")
        assert sign.call_args[0][0]["gas"] == 78_000

    def test_amount_below_token_precision(self, token_provider, eth_backend):
        with pytest.raises(InvalidAmountError):
            token_provider.send(RECIPIENT, "0.0000001")
        eth_backend.send_raw_transaction.assert_not_called()

    def test_amount_above_uint256(self, token_provider, eth_backend):
        with pytest.raises(SerializationError):
            token_provider.send(RECIPIENT, "1e100")
        eth_backend.get_pending_nonce.assert_not_called()
        eth_backend.estimate_gas.assert_not_called()
        eth_backend.send_raw_transaction.assert_not_called()
