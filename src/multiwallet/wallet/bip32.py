"""
BIP32 HD key derivation.

Paths use the usual notation, e.g. "m/84'/0'/0'/0/0" for a BIP84 receive key
or "m/44'/60'/0'/0/0" for the first Ethereum account.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass

from coincurve import PrivateKey, PublicKey

from multiwallet.constants import HARDENED_OFFSET
from multiwallet.errors import DerivationFailedError, InvalidPathComponentError

# secp256k1 curve order
SECP256K1_N = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)


@dataclass(frozen=True)
class PathComponent:
    index: int
    hardened: bool = False

    @property
    def child_index(self) -> int:
        """Index passed to CKDpriv (hardened indices are offset by 2^31)."""
        return self.index + HARDENED_OFFSET if self.hardened else self.index

    def __str__(self) -> str:
        return f"{self.index}'" if self.hardened else str(self.index)


def parse_path(path: str) -> tuple[PathComponent, ...]:
    """
    Parse a derivation path string into components.

    A leading "m" is accepted and ignored. Each remaining component is a
    decimal index below 2^31, optionally suffixed with ' or h for hardened
    derivation. The whole path is validated before anything is derived.
    """
    parts = path.strip().split("/")
    if parts and parts[0] == "m":
        parts = parts[1:]

    components: list[PathComponent] = []
    for part in parts:
        hardened = part.endswith("'") or part.endswith("h")
        index_str = part[:-1] if hardened else part

        if not index_str.isdigit() or not index_str.isascii():
            raise InvalidPathComponentError(f"Invalid path component: {part!r}")

        index = int(index_str)
        if index >= HARDENED_OFFSET:
            raise InvalidPathComponentError(f"Path index out of range: {part!r}")

        components.append(PathComponent(index, hardened))

    return tuple(components)


class HDKey:
    """
    Hierarchical Deterministic private key.
    Implements BIP32 private child derivation.
    """

    def __init__(
        self,
        private_key: PrivateKey,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b"\x00\x00\x00\x00",
        child_index: int = 0,
    ):
        self._private_key = private_key
        self._public_key = private_key.public_key
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_index = child_index

    @property
    def private_key(self) -> PrivateKey:
        """Return the coincurve PrivateKey instance."""
        return self._private_key

    @property
    def public_key(self) -> PublicKey:
        """Return the coincurve PublicKey instance."""
        return self._public_key

    @property
    def fingerprint(self) -> bytes:
        """First four bytes of HASH160 of the compressed public key."""
        from multiwallet.wallet.address import hash160

        return hash160(self.get_public_key_bytes())[:4]

    @classmethod
    def from_seed(cls, seed: bytes) -> HDKey:
        """Create master HD key from seed"""
        hmac_result = hmac.new(b"Bitcoin seed", seed, hashlib.sha512).digest()
        key_bytes = hmac_result[:32]
        chain_code = hmac_result[32:]

        key_int = int.from_bytes(key_bytes, "big")
        if key_int == 0 or key_int >= SECP256K1_N:
            raise DerivationFailedError("Seed produces an invalid master key")

        return cls(PrivateKey(key_bytes), chain_code, depth=0)

    def derive(self, path: str) -> HDKey:
        """Derive the key at the given path relative to this key."""
        key = self
        for component in parse_path(path):
            key = key.derive_child(component.child_index)
        return key

    def derive_child(self, index: int) -> HDKey:
        """Derive a child key at the given raw index (>= 2^31 means hardened)"""
        if index >= HARDENED_OFFSET:
            data = b"\x00" + self._private_key.secret + index.to_bytes(4, "big")
        else:
            data = self.get_public_key_bytes() + index.to_bytes(4, "big")

        hmac_result = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        offset_int = int.from_bytes(hmac_result[:32], "big")
        child_chain = hmac_result[32:]

        if offset_int >= SECP256K1_N:
            raise DerivationFailedError(f"Invalid child key at index {index}")

        parent_key_int = int.from_bytes(self._private_key.secret, "big")
        child_key_int = (parent_key_int + offset_int) % SECP256K1_N

        if child_key_int == 0:
            raise DerivationFailedError(f"Invalid child key at index {index}")

        return HDKey(
            PrivateKey(child_key_int.to_bytes(32, "big")),
            child_chain,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint,
            child_index=index,
        )

    def get_private_key_bytes(self) -> bytes:
        """Get private key as 32 bytes"""
        return self._private_key.secret

    def get_public_key_bytes(self, compressed: bool = True) -> bytes:
        """Get public key bytes"""
        return self._public_key.format(compressed=compressed)
