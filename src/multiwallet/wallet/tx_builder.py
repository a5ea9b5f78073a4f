"""
Transaction builder for P2WPKH spends.

Builds the transaction from the selected wallet UTXOs and the
recipient/change outputs, and serializes it in both the legacy
(txid) and the BIP144 witness format.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from multiwallet.constants import SEQUENCE_FINAL, TX_LOCKTIME, TX_VERSION
from multiwallet.errors import SerializationError
from multiwallet.wallet.address import address_to_scriptpubkey
from multiwallet.wallet.models import UTXOInfo


@dataclass
class TxInput:
    """Transaction input."""

    txid: str
    vout: int
    value: int
    sequence: int = SEQUENCE_FINAL
    witness: list[bytes] = field(default_factory=list)

    @property
    def outpoint(self) -> bytes:
        return serialize_outpoint(self.txid, self.vout)


@dataclass
class TxOutput:
    """Transaction output."""

    value: int
    script: bytes


@dataclass
class Transaction:
    inputs: list[TxInput]
    outputs: list[TxOutput]
    version: int = TX_VERSION
    locktime: int = TX_LOCKTIME

    @property
    def has_witness(self) -> bool:
        return any(inp.witness for inp in self.inputs)

    def serialize(self) -> bytes:
        """Serialize to wire format, with witness data if any input carries it."""
        return serialize_tx(self, include_witness=self.has_witness)

    def txid(self) -> str:
        """Transaction id (hash of the non-witness serialization, RPC byte order)."""
        from multiwallet.wallet.signing import hash256

        return hash256(serialize_tx(self, include_witness=False))[::-1].hex()


def varint(n: int) -> bytes:
    """Encode integer as Bitcoin varint."""
    if n < 0xFD:
        return bytes([n])
    elif n <= 0xFFFF:
        return bytes([0xFD]) + struct.pack("<H", n)
    elif n <= 0xFFFFFFFF:
        return bytes([0xFE]) + struct.pack("<I", n)
    else:
        return bytes([0xFF]) + struct.pack("<Q", n)


def serialize_outpoint(txid: str, vout: int) -> bytes:
    """Serialize outpoint (txid:vout)."""
    try:
        txid_bytes = bytes.fromhex(txid)
    except ValueError as e:
        raise SerializationError(f"Invalid previous output hash: {txid!r}") from e
    if len(txid_bytes) != 32:
        raise SerializationError(f"Invalid previous output hash length: {txid!r}")
    if not 0 <= vout <= 0xFFFFFFFF:
        raise SerializationError(f"Invalid previous output index: {vout}")
    # txid is in RPC format (big-endian), reversed for raw tx
    return txid_bytes[::-1] + struct.pack("<I", vout)


def serialize_input(inp: TxInput) -> bytes:
    """Serialize a transaction input (empty scriptSig for SegWit)."""
    return inp.outpoint + bytes([0x00]) + struct.pack("<I", inp.sequence)


def serialize_output(out: TxOutput) -> bytes:
    """Serialize a transaction output."""
    return struct.pack("<Q", out.value) + varint(len(out.script)) + out.script


def serialize_witness(stack: list[bytes]) -> bytes:
    result = varint(len(stack))
    for item in stack:
        result += varint(len(item)) + item
    return result


def serialize_tx(tx: Transaction, include_witness: bool = True) -> bytes:
    """Serialize transaction to bytes."""
    result = struct.pack("<I", tx.version)

    if include_witness:
        # Marker and flag for SegWit
        result += bytes([0x00, 0x01])

    result += varint(len(tx.inputs))
    for inp in tx.inputs:
        result += serialize_input(inp)

    result += varint(len(tx.outputs))
    for out in tx.outputs:
        result += serialize_output(out)

    if include_witness:
        for inp in tx.inputs:
            result += serialize_witness(inp.witness)

    result += struct.pack("<I", tx.locktime)
    return result


def build_unsigned_tx(
    utxos: list[UTXOInfo],
    destinations: list[tuple[str, int]],
    network: str,
) -> Transaction:
    """
    Build an unsigned transaction spending every given UTXO.

    Args:
        utxos: Selected UTXOs, one input each, in order
        destinations: (address, value) pairs, one output each, in order
        network: Network the destination addresses must belong to

    Raises:
        SerializationError: a previous output hash cannot be parsed
        AddressDecodeError: a destination address cannot be decoded
    """
    inputs = []
    for utxo in utxos:
        serialize_outpoint(utxo.txid, utxo.vout)
        inputs.append(TxInput(txid=utxo.txid, vout=utxo.vout, value=utxo.value))

    outputs = [
        TxOutput(value=value, script=address_to_scriptpubkey(address, network))
        for address, value in destinations
    ]

    return Transaction(inputs=inputs, outputs=outputs)
