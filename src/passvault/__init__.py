# passvault - Main Package
#
# Encrypted credential vault: owner-scoped storage of login credentials,
# encrypted at rest, plus a credential generator and strength scorer.

__version__ = "0.1.0"
__author__ = "passvault maintainers"
__description__ = "Encrypted credential vault with generator and strength scoring"

from .core import (
    EventType,
    EventSeverity,
    get_audit_logger,
)
from .vault import (
    CipherEngine,
    CredentialGenerator,
    StrengthScorer,
    VaultStore,
)

__all__ = [
    "__version__",
    "EventType",
    "EventSeverity",
    "get_audit_logger",
    "CipherEngine",
    "CredentialGenerator",
    "StrengthScorer",
    "VaultStore",
]
