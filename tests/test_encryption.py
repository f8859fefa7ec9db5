"""Tests for CipherEngine: round trips, envelope format, failure modes."""

import base64

import pytest

from passvault.vault import CipherEngine, ConfigurationError, DecryptionError, EncryptionError


class TestRoundTrip:

    @pytest.mark.parametrize("plaintext", [
        "hunter2",
        "correct horse battery staple",
        "pässwörd-ключ-密码-🔑",
        " leading and trailing spaces ",
        "x" * 5000,
        "",
    ])
    def test_decrypt_returns_plaintext(self, cipher, plaintext):
        assert cipher.decrypt(cipher.encrypt(plaintext)) == plaintext

    def test_same_plaintext_encrypts_differently(self, cipher):
        first = cipher.encrypt("same secret")
        second = cipher.encrypt("same secret")
        assert first != second
        assert cipher.decrypt(first) == cipher.decrypt(second) == "same secret"

    def test_other_engine_with_same_key_decrypts(self, cipher):
        ciphertext = cipher.encrypt("shared")
        assert CipherEngine("test-shared-key").decrypt(ciphertext) == "shared"

    def test_matching_key_version_is_accepted(self):
        engine = CipherEngine("k", key_version=3)
        assert engine.decrypt(engine.encrypt("v3"), key_version=3) == "v3"


class TestEnvelope:

    def test_salted_header_and_block_alignment(self, cipher):
        raw = base64.b64decode(cipher.encrypt("format check"))
        assert raw[:8] == b"Salted__"
        body = raw[16:]
        assert len(body) > 0
        assert len(body) % 16 == 0

    def test_salt_is_fresh_per_message(self, cipher):
        salts = {base64.b64decode(cipher.encrypt("a"))[8:16] for _ in range(20)}
        assert len(salts) == 20

    def test_derive_key_and_iv_sizes(self):
        key, iv = CipherEngine.derive_key_and_iv(b"passphrase", b"12345678")
        assert len(key) == 32
        assert len(iv) == 16

    def test_derive_key_and_iv_is_deterministic(self):
        assert CipherEngine.derive_key_and_iv(b"p", b"saltsalt") == \
            CipherEngine.derive_key_and_iv(b"p", b"saltsalt")


class TestFailures:

    def test_wrong_key_raises(self, cipher):
        ciphertext = cipher.encrypt("top secret value")
        with pytest.raises(DecryptionError):
            CipherEngine("another-key").decrypt(ciphertext)

    def test_corrupted_last_block_raises(self, cipher):
        raw = bytearray(base64.b64decode(cipher.encrypt("tamper me please")))
        raw[-1] ^= 0xFF
        raw[-5] ^= 0xFF
        with pytest.raises(DecryptionError):
            cipher.decrypt(base64.b64encode(bytes(raw)).decode())

    def test_truncated_ciphertext_raises(self, cipher):
        raw = base64.b64decode(cipher.encrypt("truncate me"))
        with pytest.raises(DecryptionError):
            cipher.decrypt(base64.b64encode(raw[:-3]).decode())

    def test_missing_header_raises(self, cipher):
        raw = base64.b64decode(cipher.encrypt("header"))
        with pytest.raises(DecryptionError):
            cipher.decrypt(base64.b64encode(b"Unsalted" + raw[8:]).decode())

    @pytest.mark.parametrize("garbage", ["", "not base64 !!", "U2FsdGVkX18=", "ü"])
    def test_garbage_raises(self, cipher, garbage):
        with pytest.raises(DecryptionError):
            cipher.decrypt(garbage)

    def test_non_string_ciphertext_raises(self, cipher):
        with pytest.raises(DecryptionError):
            cipher.decrypt(None)

    def test_foreign_key_version_raises(self, cipher):
        ciphertext = cipher.encrypt("v1")
        with pytest.raises(DecryptionError):
            cipher.decrypt(ciphertext, key_version=2)

    def test_non_string_plaintext_raises(self, cipher):
        with pytest.raises(EncryptionError):
            cipher.encrypt(b"bytes")

    def test_empty_shared_key_rejected(self):
        with pytest.raises(ConfigurationError):
            CipherEngine("")
