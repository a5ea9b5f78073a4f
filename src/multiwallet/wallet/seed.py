"""
Master seed storage.

The seed record is the only durable secret of the wallet. It holds the
64-byte BIP39 seed either in plaintext or sealed with AES-256-GCM:

    nonce (12 bytes) || ciphertext || tag (16 bytes)

with key = SHA256(password).
"""

from __future__ import annotations

import hashlib
import os
import secrets
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from loguru import logger
from mnemonic import Mnemonic
from pydantic import BaseModel, ValidationError, field_serializer, field_validator

from multiwallet.errors import (
    DecryptionFailedError,
    InvalidMnemonicError,
    StorageCorruptError,
    StorageNotFoundError,
)

AES_NONCE_SIZE = 12
DEFAULT_SEED_FILE = Path("seed.dat")

# Owner read/write only
SECURE_FILE_MODE = 0o600

_WORDLIST = Mnemonic("english")


class SeedRecord(BaseModel):
    """Persisted master seed, sealed or plain."""

    seed: bytes
    is_encrypted: bool = False

    model_config = {"frozen": True}

    @field_validator("seed", mode="before")
    @classmethod
    def decode_hex(cls, v: object) -> object:
        if isinstance(v, str):
            return bytes.fromhex(v)
        return v

    @field_serializer("seed")
    def encode_hex(self, v: bytes) -> str:
        return v.hex()


def normalize_mnemonic(mnemonic: str) -> str:
    return " ".join(mnemonic.lower().split())


def validate_mnemonic(mnemonic: str) -> str:
    """Return the normalized mnemonic, or raise InvalidMnemonicError."""
    normalized = normalize_mnemonic(mnemonic)
    if not normalized:
        raise InvalidMnemonicError("Empty mnemonic")
    if not _WORDLIST.check(normalized):
        raise InvalidMnemonicError("Invalid mnemonic (unknown word or bad checksum)")
    return normalized


def generate_mnemonic(word_count: int = 24) -> str:
    """
    Generate a BIP39 mnemonic from secure entropy.

    Args:
        word_count: Number of words (12 or 24)
    """
    if word_count not in (12, 24):
        raise ValueError("word_count must be 12 or 24")
    return _WORDLIST.generate(strength=word_count * 32 // 3)


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> bytes:
    """Convert BIP39 mnemonic to seed."""
    return Mnemonic.to_seed(normalize_mnemonic(mnemonic), passphrase)


def _password_key(password: str) -> bytes:
    return hashlib.sha256(password.encode("utf-8")).digest()


def encrypt_seed(seed: bytes, password: str) -> bytes:
    """Seal the seed with AES-256-GCM, prepending the random nonce."""
    nonce = secrets.token_bytes(AES_NONCE_SIZE)
    return nonce + AESGCM(_password_key(password)).encrypt(nonce, seed, None)


def decrypt_seed(encrypted_seed: bytes, password: str) -> bytes:
    """
    Open a sealed seed.

    Raises: DecryptionFailedError if the password is wrong, the data was
    tampered with, or the blob is too short to contain a nonce.
    """
    if len(encrypted_seed) < AES_NONCE_SIZE:
        raise DecryptionFailedError("Encrypted seed too short")

    nonce, ciphertext = encrypted_seed[:AES_NONCE_SIZE], encrypted_seed[AES_NONCE_SIZE:]
    try:
        return AESGCM(_password_key(password)).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        raise DecryptionFailedError("Failed to decrypt seed (wrong password?)") from e


def generate_seed_record(mnemonic: str, password: str = "") -> SeedRecord:
    """
    Derive the BIP39 seed from a mnemonic and wrap it in a record.

    With an empty password the seed is stored in plaintext; warning the user
    about that is up to the caller.
    """
    seed = mnemonic_to_seed(validate_mnemonic(mnemonic))

    if password:
        return SeedRecord(seed=encrypt_seed(seed, password), is_encrypted=True)
    return SeedRecord(seed=seed, is_encrypted=False)


def unseal(record: SeedRecord, password: str = "") -> bytes:
    """Return the raw seed bytes of a record."""
    if record.is_encrypted:
        return decrypt_seed(record.seed, password)
    return record.seed


class SeedVault:
    """Loads and saves the seed record at a fixed path."""

    def __init__(self, path: Path | str = DEFAULT_SEED_FILE):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, record: SeedRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(record.model_dump_json())
        if os.name == "posix":
            os.chmod(self.path, SECURE_FILE_MODE)
        logger.info(f"Seed record written to {self.path} (encrypted={record.is_encrypted})")

    def load(self) -> SeedRecord:
        try:
            data = self.path.read_text()
        except FileNotFoundError as e:
            raise StorageNotFoundError(f"Seed file not found: {self.path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise StorageCorruptError(f"Failed to read seed file {self.path}: {e}") from e

        try:
            return SeedRecord.model_validate_json(data)
        except ValidationError as e:
            raise StorageCorruptError(f"Failed to decode seed file {self.path}") from e

    def generate(self, mnemonic: str, password: str = "") -> SeedRecord:
        """Create a seed record from a mnemonic and persist it."""
        record = generate_seed_record(mnemonic, password)
        self.save(record)
        return record
