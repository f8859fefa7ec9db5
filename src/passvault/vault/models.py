"""Vault record types.

SecretRecord mirrors a stored row (ciphertext only). VaultItem is what the
store hands back to its owner: the same fields with the secret decrypted.
"""

import json
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class SecretRecord:
    """One stored credential entry."""
    id: str                   # UUID
    owner_id: str             # Authenticated creator, never changes
    title: str
    username: str
    encrypted_secret: str     # CipherEngine envelope, never the plaintext
    url: str = ""
    notes: str = ""
    tags: List[str] = field(default_factory=list)
    created_at: str = ""      # ISO 8601 UTC
    updated_at: str = ""      # ISO 8601 UTC
    key_version: int = 1      # Which shared key wrote encrypted_secret

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "SecretRecord":
        try:
            tags = json.loads(row["tags"] or "[]")
        except (json.JSONDecodeError, TypeError):
            tags = []
        return cls(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            username=row["username"],
            encrypted_secret=row["encrypted_secret"],
            url=row["url"] or "",
            notes=row["notes"] or "",
            tags=tags,
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            key_version=row["key_version"],
        )

    def reveal(self, secret: str) -> "VaultItem":
        """Pair this record's metadata with its decrypted secret."""
        return VaultItem(
            id=self.id,
            owner_id=self.owner_id,
            title=self.title,
            username=self.username,
            secret=secret,
            url=self.url,
            notes=self.notes,
            tags=list(self.tags),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


@dataclass
class VaultItem:
    """A record as returned to its owner, secret in plaintext."""
    id: str
    owner_id: str
    title: str
    username: str
    secret: str
    url: str = ""
    notes: str = ""
    tags: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "username": self.username,
            "secret": self.secret,
            "url": self.url,
            "notes": self.notes,
            "tags": list(self.tags),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
