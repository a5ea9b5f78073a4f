"""
ERC-20 call data encoding and result decoding.
"""

from __future__ import annotations

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from multiwallet.errors import SerializationError

TRANSFER_SELECTOR = function_signature_to_4byte_selector("transfer(address,uint256)")
BALANCE_OF_SELECTOR = function_signature_to_4byte_selector("balanceOf(address)")
DECIMALS_SELECTOR = function_signature_to_4byte_selector("decimals()")
SYMBOL_SELECTOR = function_signature_to_4byte_selector("symbol()")


def encode_transfer(to: str, amount: int) -> bytes:
    try:
        args = encode(["address", "uint256"], [to_checksum_address(to), amount])
    except EncodingError as e:
        raise SerializationError(f"Failed to encode transfer of {amount}: {e}") from e
    return TRANSFER_SELECTOR + args


def encode_balance_of(owner: str) -> bytes:
    return BALANCE_OF_SELECTOR + encode(["address"], [to_checksum_address(owner)])


def encode_decimals() -> bytes:
    return DECIMALS_SELECTOR


def encode_symbol() -> bytes:
    return SYMBOL_SELECTOR


def _decode_single(abi_type: str, data: bytes) -> object:
    try:
        return decode([abi_type], data)[0]
    except DecodingError as e:
        raise SerializationError(f"Failed to decode {abi_type} result: {e}") from e


def decode_uint(data: bytes, bits: int = 256) -> int:
    return int(_decode_single(f"uint{bits}", data))  # type: ignore[call-overload]


def decode_string(data: bytes) -> str:
    return str(_decode_single("string", data))
