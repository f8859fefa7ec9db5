"""
Vault Exception Classes
"""


class VaultError(Exception):
    """Base exception for vault operations"""
    pass


class ValidationError(VaultError):
    """Raised when a required field is missing or empty"""
    pass


class AuthError(VaultError):
    """Raised when no authenticated owner id can be resolved"""
    pass


class NotFoundError(VaultError):
    """Raised when an item is absent or belongs to another owner.

    The message is always the same so callers cannot tell the two apart.
    """

    def __init__(self, message: str = "item not found"):
        super().__init__(message)


class ConfigurationError(VaultError):
    """Raised when generator options or settings are unusable"""
    pass


class EncryptionError(VaultError):
    """Raised when the cipher fails to encrypt a secret"""
    pass


class DecryptionError(VaultError):
    """Raised when ciphertext is corrupted or was made with another key"""
    pass
