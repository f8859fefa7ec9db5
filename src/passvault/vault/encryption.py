# Vault - Encryption Service
#
# Shared key → per-message key + IV (EVP_BytesToKey, MD5, fresh 8-byte salt)
# Secret encryption (AES-256-CBC, PKCS7 padding)
# Output is the OpenSSL "Salted__" envelope, base64 encoded, so values written
# by CryptoJS.AES.encrypt(text, passphrase) decrypt here and vice versa.
#
# Integrity: CBC has no authentication tag. A wrong key or corrupted blob is
# detected only by bad padding or bytes that are not valid UTF-8.

import base64
import binascii
import os
from typing import Optional, Tuple

from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .exceptions import ConfigurationError, DecryptionError, EncryptionError


class CipherEngine:
    """
    Encrypts and decrypts single secret strings under one shared key.

    Flow:
    1. Draw a random 8-byte salt for every message
    2. EVP_BytesToKey derives a 256-bit key and 128-bit IV from key + salt
    3. AES-256-CBC encrypts the UTF-8 plaintext
    4. "Salted__" + salt + ciphertext is base64 encoded for storage

    The same plaintext encrypts to a different value every time; any engine
    built with the same shared key can decrypt it.
    """

    MAGIC = b"Salted__"
    SALT_LENGTH = 8
    KEY_LENGTH = 32  # 256 bits for AES-256
    IV_LENGTH = 16  # AES block size
    BLOCK_SIZE_BITS = 128

    def __init__(self, shared_key: str, key_version: int = 1):
        """
        Args:
            shared_key: Passphrase used for every record
            key_version: Tag stored next to each ciphertext so a future
                         rotation can tell which key wrote it
        """
        if not shared_key:
            raise ConfigurationError("Encryption key must not be empty")
        self._passphrase = shared_key.encode("utf-8")
        self.key_version = key_version

    @staticmethod
    def derive_key_and_iv(passphrase: bytes, salt: bytes) -> Tuple[bytes, bytes]:
        """
        OpenSSL EVP_BytesToKey with MD5 and a single iteration.

        Args:
            passphrase: Shared key bytes
            salt: 8-byte salt taken from the envelope

        Returns:
            (key, iv) sized for AES-256-CBC
        """
        needed = CipherEngine.KEY_LENGTH + CipherEngine.IV_LENGTH
        derived = b""
        block = b""
        while len(derived) < needed:
            digest = hashes.Hash(hashes.MD5(), backend=default_backend())
            digest.update(block + passphrase + salt)
            block = digest.finalize()
            derived += block
        return derived[:CipherEngine.KEY_LENGTH], derived[CipherEngine.KEY_LENGTH:needed]

    @staticmethod
    def generate_salt() -> bytes:
        """Generate cryptographically random salt."""
        return os.urandom(CipherEngine.SALT_LENGTH)

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt a secret for storage.

        Args:
            plaintext: Secret to encrypt

        Returns:
            Base64 "Salted__" envelope

        Raises:
            EncryptionError: If the plaintext is not text or the cipher fails
        """
        if not isinstance(plaintext, str):
            raise EncryptionError("Plaintext must be a string")

        try:
            salt = self.generate_salt()
            key, iv = self.derive_key_and_iv(self._passphrase, salt)

            padder = padding.PKCS7(self.BLOCK_SIZE_BITS).padder()
            padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()

            encryptor = Cipher(
                algorithms.AES(key), modes.CBC(iv), backend=default_backend()
            ).encryptor()
            ciphertext = encryptor.update(padded) + encryptor.finalize()
        except (ValueError, UnicodeEncodeError) as e:
            raise EncryptionError(f"Failed to encrypt data: {e}") from e

        return self.encode_for_storage(self.MAGIC + salt + ciphertext)

    def decrypt(self, ciphertext: str, key_version: Optional[int] = None) -> str:
        """
        Decrypt a stored secret.

        Args:
            ciphertext: Base64 envelope produced by encrypt()
            key_version: Version tag stored with the ciphertext, if known

        Returns:
            Decrypted plaintext

        Raises:
            DecryptionError: Wrong key, corrupted data, or foreign key version
        """
        if key_version is not None and key_version != self.key_version:
            raise DecryptionError(
                f"Ciphertext was written with key version {key_version}, "
                f"engine holds version {self.key_version}"
            )

        if not isinstance(ciphertext, str):
            raise DecryptionError("Ciphertext must be a string")

        try:
            raw = self.decode_from_storage(ciphertext)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Ciphertext is not valid base64") from e

        header_length = len(self.MAGIC) + self.SALT_LENGTH
        if not raw.startswith(self.MAGIC) or len(raw) <= header_length:
            raise DecryptionError("Ciphertext is missing the salt header")

        salt = raw[len(self.MAGIC):header_length]
        body = raw[header_length:]
        if len(body) % self.IV_LENGTH:
            raise DecryptionError("Ciphertext is not block aligned")

        key, iv = self.derive_key_and_iv(self._passphrase, salt)
        decryptor = Cipher(
            algorithms.AES(key), modes.CBC(iv), backend=default_backend()
        ).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        try:
            unpadder = padding.PKCS7(self.BLOCK_SIZE_BITS).unpadder()
            plaintext_bytes = unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise DecryptionError("Failed to decrypt data - invalid key or corrupted data") from e

        try:
            return plaintext_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Failed to decrypt data - invalid key or corrupted data") from e

    @staticmethod
    def encode_for_storage(data: bytes) -> str:
        """Encode binary data for database storage (base64)."""
        return base64.b64encode(data).decode("ascii")

    @staticmethod
    def decode_from_storage(data: str) -> bytes:
        """Decode base64-encoded data from database."""
        return base64.b64decode(data.encode("ascii"), validate=True)
