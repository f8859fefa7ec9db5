# Vault Module - Encrypted Credential Storage
#
# Owner-scoped credential storage with per-secret encryption,
# plus the credential generator and strength scorer.

from .encryption import CipherEngine
from .exceptions import (
    AuthError,
    ConfigurationError,
    DecryptionError,
    EncryptionError,
    NotFoundError,
    ValidationError,
    VaultError,
)
from .generator import CredentialGenerator
from .models import SecretRecord, VaultItem
from .strength import StrengthCategory, StrengthReport, StrengthScorer
from .vault_database import VaultDatabase
from .vault_store import VaultStore

__all__ = [
    "CipherEngine",
    "CredentialGenerator",
    "StrengthScorer",
    "StrengthReport",
    "StrengthCategory",
    "VaultDatabase",
    "VaultStore",
    "SecretRecord",
    "VaultItem",
    # Errors
    "VaultError",
    "ValidationError",
    "AuthError",
    "NotFoundError",
    "ConfigurationError",
    "EncryptionError",
    "DecryptionError",
]
