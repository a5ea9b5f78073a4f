"""
Bitcoin and Ethereum policy constants.

The fee and gas values here are the defaults for FeePolicy; a wallet config
can override any of them without touching the provider code.
"""

from __future__ import annotations

BITCOIN_DECIMALS = 8
ETHER_DECIMALS = 18

# Static Bitcoin fee rate, not fetched from the network
DEFAULT_SATS_PER_VBYTE = 2

# P2WPKH size components (bytes)
P2WPKH_INPUT_BASE_SIZE = 41  # outpoint(36) + scriptSig len(1) + sequence(4)
P2WPKH_OUTPUT_SIZE = 31  # value(8) + script len(1) + script(22)
P2WPKH_WITNESS_SIZE = 108  # item count(1) + sig(1+72) + pubkey(1+33)
SEGWIT_MARKER_FLAG_SIZE = 2

# Standard P2PKH dust limit in Bitcoin Core
STANDARD_DUST_LIMIT = 546  # satoshis

TX_VERSION = 1
TX_LOCKTIME = 0
SEQUENCE_FINAL = 0xFFFFFFFF
SIGHASH_ALL = 1

# Exact cost of a plain value transfer
ETH_TRANSFER_GAS = 21_000

# Used when eth_estimateGas fails for a token transfer
ERC20_FALLBACK_GAS = 65_000

# Percent multipliers, applied as value * pct // 100
ERC20_FEE_CAP_BUFFER_PERCENT = 125
ERC20_GAS_BUFFER_PERCENT = 120

DEFAULT_HTTP_TIMEOUT = 30.0  # seconds

HARDENED_OFFSET = 0x80000000
