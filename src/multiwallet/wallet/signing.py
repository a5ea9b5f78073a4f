"""
BIP143 signature hashes and P2WPKH witnesses.

Every input of a wallet transaction spends an output locked to the
provider key, so one key signs them all.
"""

from __future__ import annotations

import hashlib

from coincurve import PrivateKey

from multiwallet.constants import SIGHASH_ALL
from multiwallet.errors import SerializationError, SigningError
from multiwallet.wallet.address import hash160
from multiwallet.wallet.tx_builder import Transaction, serialize_output, varint


def hash256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def compute_sighash_segwit(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """Compute the BIP143 signature hash for a segwit v0 input."""
    if input_index >= len(tx.inputs):
        raise SigningError(f"Input index {input_index} out of range")

    try:
        hash_prevouts = hash256(b"".join(inp.outpoint for inp in tx.inputs))
        hash_sequence = hash256(
            b"".join(inp.sequence.to_bytes(4, "little") for inp in tx.inputs)
        )
        hash_outputs = hash256(b"".join(serialize_output(out) for out in tx.outputs))

        target_input = tx.inputs[input_index]

        preimage = (
            tx.version.to_bytes(4, "little")
            + hash_prevouts
            + hash_sequence
            + target_input.outpoint
            + varint(len(script_code))
            + script_code
            + value.to_bytes(8, "little")
            + target_input.sequence.to_bytes(4, "little")
            + hash_outputs
            + tx.locktime.to_bytes(4, "little")
            + sighash_type.to_bytes(4, "little")
        )
    except (SerializationError, OverflowError) as e:
        raise SigningError(f"Failed to compute sighash: {e}") from e

    return hash256(preimage)


def create_p2wpkh_script_code(pubkey_bytes: bytes) -> bytes:
    """
    BIP143 scriptCode of a P2WPKH output: the equivalent P2PKH script.

    The length prefix is added when the preimage is assembled.
    """
    return b"\x76\xa9\x14" + hash160(pubkey_bytes) + b"\x88\xac"


def create_witness_stack(signature: bytes, pubkey_bytes: bytes) -> list[bytes]:
    return [signature, pubkey_bytes]


def sign_p2wpkh_input(
    tx: Transaction,
    input_index: int,
    value: int,
    private_key: PrivateKey,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """
    Sign one P2WPKH input.

    Args:
        tx: Unsigned transaction
        input_index: Position of the input in tx.inputs
        value: Amount of the spent output in satoshis (committed to by BIP143)
        private_key: Key the spent output is locked to
        sighash_type: Appended to the DER signature
    """
    pubkey_bytes = private_key.public_key.format(compressed=True)
    script_code = create_p2wpkh_script_code(pubkey_bytes)
    sighash = compute_sighash_segwit(tx, input_index, script_code, value, sighash_type)

    # The sighash is already SHA256d, so coincurve must not hash it again
    try:
        signature = private_key.sign(sighash, hasher=None)
    except ValueError as e:
        raise SigningError(f"Failed to sign input {input_index}: {e}") from e

    return signature + bytes([sighash_type])


def sign_p2wpkh_transaction(tx: Transaction, private_key: PrivateKey) -> Transaction:
    """
    Sign every input of tx with the same key and attach the witnesses.

    All inputs are assumed to spend P2WPKH outputs locked to private_key.
    Signatures are computed for every input before any witness is attached,
    so a failure leaves tx untouched.
    """
    pubkey_bytes = private_key.public_key.format(compressed=True)

    witnesses = [
        create_witness_stack(sign_p2wpkh_input(tx, i, inp.value, private_key), pubkey_bytes)
        for i, inp in enumerate(tx.inputs)
    ]

    for inp, witness in zip(tx.inputs, witnesses, strict=True):
        inp.witness = witness

    return tx
