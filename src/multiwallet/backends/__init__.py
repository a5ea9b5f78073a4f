"""
Blockchain backend implementations.

Available backends:
- MempoolBackend: Esplora REST API (mempool.space, blockstream.info) for Bitcoin
- EthereumRpcBackend: JSON-RPC node access for Ethereum and ERC-20 tokens
"""

from multiwallet.backends.base import BitcoinBackend, EthereumBackend
from multiwallet.backends.ethereum import EthereumRpcBackend
from multiwallet.backends.mempool import MempoolBackend

__all__ = [
    "BitcoinBackend",
    "EthereumBackend",
    "EthereumRpcBackend",
    "MempoolBackend",
]
