"""
Tests for mnemonic handling and the seed vault.
"""

from __future__ import annotations

import os

import pytest

from multiwallet.errors import (
    DecryptionFailedError,
    InvalidMnemonicError,
    StorageCorruptError,
    StorageNotFoundError,
)
from multiwallet.wallet.seed import (
    SeedRecord,
    SeedVault,
    decrypt_seed,
    encrypt_seed,
    generate_mnemonic,
    generate_seed_record,
    mnemonic_to_seed,
    unseal,
    validate_mnemonic,
)

ABANDON_SEED = (
    "5eb00bbddcf069084889a8ab9155568165f5c453ccb85e70811aaed6f6da5fc1"
    "9a5ac40b389cd370d086206dec8aa6c43daea6690f20ad3d8d48b2d2ce9e38e4"
)


class TestMnemonic:
    def test_seed_vector(self, sample_mnemonic):
        assert mnemonic_to_seed(sample_mnemonic).hex() == ABANDON_SEED

    def test_whitespace_and_case_are_normalized(self, sample_mnemonic):
        messy = "  " + sample_mnemonic.upper().replace(" ", "   ") + "\n"
        assert validate_mnemonic(messy) == sample_mnemonic
        assert mnemonic_to_seed(messy).hex() == ABANDON_SEED

    def test_bad_checksum(self):
        with pytest.raises(InvalidMnemonicError):
            validate_mnemonic(" ".join(["abandon"] * 12))

    def test_unknown_word(self, sample_mnemonic):
        with pytest.raises(InvalidMnemonicError):
            validate_mnemonic(sample_mnemonic.replace("about", "aboot"))

    @pytest.mark.parametrize("mnemonic", ["", "   ", "\n"])
    def test_empty(self, mnemonic):
        with pytest.raises(InvalidMnemonicError):
            validate_mnemonic(mnemonic)

    @pytest.mark.parametrize("words", [12, 24])
    def test_generate(self, words):
        mnemonic = generate_mnemonic(words)
        assert len(mnemonic.split()) == words
        assert validate_mnemonic(mnemonic) == mnemonic

    def test_generate_rejects_other_lengths(self):
        with pytest.raises(ValueError):
            generate_mnemonic(15)


class TestSeedEncryption:
    def test_roundtrip(self):
        seed = bytes(range(64))
        sealed = encrypt_seed(seed, "hunter2")
        # nonce + ciphertext + tag
        assert len(sealed) == 12 + 64 + 16
        assert decrypt_seed(sealed, "hunter2") == seed

    def test_nonce_is_random(self):
        seed = bytes(64)
        assert encrypt_seed(seed, "pw") != encrypt_seed(seed, "pw")

    def test_wrong_password(self):
        sealed = encrypt_seed(bytes(64), "right")
        with pytest.raises(DecryptionFailedError):
            decrypt_seed(sealed, "wrong")

    def test_tampered_ciphertext(self):
        sealed = bytearray(encrypt_seed(bytes(64), "pw"))
        sealed[-1] ^= 0x01
        with pytest.raises(DecryptionFailedError):
            decrypt_seed(bytes(sealed), "pw")

    def test_blob_shorter_than_nonce(self):
        with pytest.raises(DecryptionFailedError):
            decrypt_seed(b"\x00" * 11, "pw")


class TestSeedRecord:
    def test_plaintext_record(self, sample_mnemonic):
        record = generate_seed_record(sample_mnemonic)
        assert not record.is_encrypted
        assert record.seed.hex() == ABANDON_SEED
        assert unseal(record) == bytes.fromhex(ABANDON_SEED)

    def test_encrypted_record(self, sample_mnemonic):
        record = generate_seed_record(sample_mnemonic, "pw")
        assert record.is_encrypted
        assert record.seed.hex() != ABANDON_SEED
        assert unseal(record, "pw").hex() == ABANDON_SEED

    def test_encrypted_record_wrong_password(self, sample_mnemonic):
        record = generate_seed_record(sample_mnemonic, "pw")
        with pytest.raises(DecryptionFailedError):
            unseal(record, "")

    def test_json_stores_hex(self):
        record = SeedRecord(seed=b"\x01\x02", is_encrypted=False)
        assert '"0102"' in record.model_dump_json()
        assert SeedRecord.model_validate_json(record.model_dump_json()) == record

    def test_invalid_mnemonic_creates_nothing(self, tmp_path):
        vault = SeedVault(tmp_path / "seed.dat")
        with pytest.raises(InvalidMnemonicError):
            vault.generate("not a mnemonic")
        assert not vault.exists()


class TestSeedVault:
    def test_save_and_load(self, tmp_path, sample_mnemonic):
        vault = SeedVault(tmp_path / "wallet" / "seed.dat")
        record = vault.generate(sample_mnemonic, "pw")

        assert vault.exists()
        loaded = vault.load()
        assert loaded == record
        assert unseal(loaded, "pw").hex() == ABANDON_SEED

    @pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
    def test_file_is_owner_only(self, tmp_path, sample_mnemonic):
        vault = SeedVault(tmp_path / "seed.dat")
        vault.generate(sample_mnemonic)
        assert (vault.path.stat().st_mode & 0o777) == 0o600

    def test_load_missing(self, tmp_path):
        with pytest.raises(StorageNotFoundError):
            SeedVault(tmp_path / "missing.dat").load()

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            "{}",
            '{"seed": "zz", "is_encrypted": false}',
            '{"seed": "00", "is_encrypted": "maybe"}',
        ],
    )
    def test_load_corrupt(self, tmp_path, content):
        path = tmp_path / "seed.dat"
        path.write_text(content)
        with pytest.raises(StorageCorruptError):
            SeedVault(path).load()

    def test_load_directory(self, tmp_path):
        with pytest.raises(StorageCorruptError):
            SeedVault(tmp_path).load()
