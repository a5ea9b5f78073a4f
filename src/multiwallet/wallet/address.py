"""
Bitcoin address generation and decoding utilities.
"""

from __future__ import annotations

import hashlib

import base58
import bech32
from bip_utils import Bech32ChecksumError, P2TRAddrDecoder

from multiwallet.errors import AddressDecodeError, ScriptBuildError

# Bech32 human readable parts. "testnet" covers testnet3/4 and signet.
BECH32_HRP = {"mainnet": "bc", "testnet": "tb"}

# Base58check version bytes: (P2PKH, P2SH)
BASE58_VERSIONS = {"mainnet": (0x00, 0x05), "testnet": (0x6F, 0xC4)}


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    h = hashlib.new("ripemd160")
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def get_hrp(network: str) -> str:
    try:
        return BECH32_HRP[network]
    except KeyError:
        raise AddressDecodeError(f"No address encoding for network: {network}") from None


def pubkey_to_p2wpkh_address(pubkey: bytes, network: str = "mainnet") -> str:
    """
    Convert compressed public key to P2WPKH (native segwit) address.
    BIP173 bech32 encoding.
    """
    if len(pubkey) != 33:
        raise ScriptBuildError(f"Invalid compressed pubkey length: {len(pubkey)}")

    address = bech32.encode(get_hrp(network), 0, hash160(pubkey))
    if address is None:
        raise ScriptBuildError(f"Failed to encode P2WPKH address for {pubkey.hex()}")
    return address


def pubkey_to_p2wpkh_script(pubkey: bytes) -> bytes:
    """Create P2WPKH scriptPubKey (OP_0 <20-byte-hash>)"""
    return bytes([0x00, 0x14]) + hash160(pubkey)


def address_to_scriptpubkey(address: str, network: str = "mainnet") -> bytes:
    """
    Convert a Bitcoin address of the given network to its scriptPubKey.

    Supports:
    - P2WPKH and P2WSH (witness v0, bech32)
    - P2TR (witness v1, bech32m)
    - P2PKH and P2SH (base58check)

    Raises AddressDecodeError for malformed addresses or addresses that
    belong to a different network.
    """
    hrp = get_hrp(network)

    if address.lower().startswith(hrp + "1"):
        witver, witprog = bech32.decode(hrp, address)
        if witver is None or witprog is None:
            # bech32 only verifies the v0 checksum, taproot addresses are bech32m
            return taproot_to_scriptpubkey(address, hrp)

        program = bytes(witprog)
        if witver == 0 and len(program) == 20:
            # P2WPKH: OP_0 <20-byte-pubkeyhash>
            return bytes([0x00, 0x14]) + program
        if witver == 0 and len(program) == 32:
            # P2WSH: OP_0 <32-byte-scripthash>
            return bytes([0x00, 0x20]) + program

        raise AddressDecodeError(
            f"Unsupported witness program (v{witver}, {len(program)} bytes): {address}"
        )

    try:
        decoded = base58.b58decode_check(address)
    except ValueError as e:
        raise AddressDecodeError(f"Invalid address: {address}") from e

    if len(decoded) != 21:
        raise AddressDecodeError(f"Invalid base58 payload length: {address}")

    version, payload = decoded[0], decoded[1:]
    p2pkh_version, p2sh_version = BASE58_VERSIONS[network]

    if version == p2pkh_version:
        # OP_DUP OP_HASH160 <20-byte-pubkeyhash> OP_EQUALVERIFY OP_CHECKSIG
        return bytes([0x76, 0xA9, 0x14]) + payload + bytes([0x88, 0xAC])
    if version == p2sh_version:
        # OP_HASH160 <20-byte-scripthash> OP_EQUAL
        return bytes([0xA9, 0x14]) + payload + bytes([0x87])

    raise AddressDecodeError(f"Address {address} is not valid on {network}")


def taproot_to_scriptpubkey(address: str, hrp: str) -> bytes:
    """Decode a bech32m witness v1 address to OP_1 <32-byte output key>."""
    try:
        output_key = P2TRAddrDecoder().DecodeAddr(address.lower(), hrp=hrp)
    except (ValueError, Bech32ChecksumError) as e:
        raise AddressDecodeError(f"Invalid bech32 address: {address}") from e
    return bytes([0x51, 0x20]) + bytes(output_key)
