# Vault Store - Owner-Scoped Encrypted Credential Storage
#
# CRUD + search over one owner's secret records.
# Secrets are encrypted before they reach VaultDatabase and decrypted before
# they leave this class. Every query is filtered by owner_id, and a foreign id
# looks exactly like a missing one.

import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from ..core import EventSeverity, EventType, get_audit_logger
from ..core.audit_log import AuditLogger
from .encryption import CipherEngine
from .exceptions import AuthError, DecryptionError, EncryptionError, NotFoundError, ValidationError
from .models import SecretRecord, VaultItem
from .vault_database import VaultDatabase


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _trim(value: Optional[str]) -> str:
    return (value or "").strip()


def _trim_tags(tags: Optional[Iterable[str]]) -> List[str]:
    # Order and duplicates are kept as entered
    return [str(tag).strip() for tag in (tags or [])]


class VaultStore:
    """
    Owner-scoped vault of encrypted credentials.

    Security:
    - The secret field is encrypted with CipherEngine before every write
    - Secrets are decrypted only for the owner that wrote them
    - Update/delete/get match on id AND owner_id; misses raise the same
      NotFoundError whether the id is unknown or someone else's
    - Audit logging for all vault access (never the secret itself)

    Create and update echo the caller's plaintext secret back in the
    returned VaultItem; the caller just submitted it.
    """

    def __init__(
        self,
        database: VaultDatabase,
        cipher: CipherEngine,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Args:
            database: Store handle, built once at startup
            cipher: Engine holding the shared key
            audit_logger: Defaults to the process audit logger
        """
        self.database = database
        self.cipher = cipher
        self.logger = audit_logger or get_audit_logger()

    # ── Guards ───────────────────────────────────────────────────────

    def _require_owner(self, owner_id: Optional[str]) -> str:
        if not owner_id or not str(owner_id).strip():
            self.logger.log_event(
                event_type=EventType.AUTH_FAILED,
                severity=EventSeverity.ALERT,
                message="Vault operation without an authenticated owner",
            )
            raise AuthError("Unauthorized")
        return str(owner_id).strip()

    def _validate(
        self,
        owner_id: str,
        title: Optional[str],
        username: Optional[str],
        secret: Optional[str],
    ) -> None:
        for field_name, value in (
            ("title", title),
            ("username", username),
            ("secret", secret),
        ):
            if not _trim(value):
                self.logger.log_vault_event(
                    event_type=EventType.VAULT_VALIDATION_FAILED,
                    message=f"Rejected item without {field_name}",
                    owner_id=owner_id,
                    severity=EventSeverity.INVESTIGATE,
                )
                raise ValidationError(f"{field_name} is required")

    def _encrypt(self, owner_id: str, secret: str) -> str:
        try:
            return self.cipher.encrypt(secret)
        except EncryptionError as e:
            self.logger.log_vault_event(
                event_type=EventType.VAULT_ERROR,
                message=f"Failed to encrypt secret: {e}",
                owner_id=owner_id,
                severity=EventSeverity.CRITICAL,
            )
            raise

    def _reveal(self, record: SecretRecord) -> VaultItem:
        try:
            secret = self.cipher.decrypt(record.encrypted_secret, record.key_version)
        except DecryptionError as e:
            self.logger.log_vault_event(
                event_type=EventType.VAULT_ERROR,
                message=f"Failed to decrypt secret: {e}",
                owner_id=record.owner_id,
                details={"item_id": record.id, "key_version": record.key_version},
                severity=EventSeverity.CRITICAL,
            )
            raise
        return record.reveal(secret)

    def _not_found(self, owner_id: str, item_id: str, action: str) -> NotFoundError:
        self.logger.log_vault_event(
            event_type=EventType.VAULT_ITEM_NOT_FOUND,
            message=f"{action} matched no owned item",
            owner_id=owner_id,
            details={"item_id": item_id},
            severity=EventSeverity.INVESTIGATE,
        )
        return NotFoundError()

    # ── Operations ───────────────────────────────────────────────────

    def list_items(self, owner_id: str, search: Optional[str] = None) -> List[VaultItem]:
        """
        List the owner's items, newest first, secrets decrypted.

        Args:
            owner_id: Authenticated owner
            search: Optional case-insensitive substring matched against
                    title, username, url and tags

        Raises:
            AuthError: No owner id
            DecryptionError: A stored secret could not be decrypted
        """
        owner_id = self._require_owner(owner_id)
        term = search if search and search.strip() else None

        records = self.database.list_for_owner(owner_id, term)
        items = [self._reveal(record) for record in records]

        self.logger.log_vault_event(
            event_type=EventType.VAULT_ITEMS_LISTED,
            message=f"Listed {len(items)} item(s)",
            owner_id=owner_id,
            details={"searched": term is not None, "count": len(items)},
        )
        return items

    def get_item(self, owner_id: str, item_id: str) -> VaultItem:
        """Return one owned item with its secret decrypted."""
        owner_id = self._require_owner(owner_id)

        record = self.database.get(owner_id, item_id)
        if record is None:
            raise self._not_found(owner_id, item_id, "Read")

        item = self._reveal(record)
        self.logger.log_vault_event(
            event_type=EventType.VAULT_ITEM_ACCESSED,
            message=f"Item accessed: {record.title}",
            owner_id=owner_id,
            details={"item_id": item_id},
        )
        return item

    def create_item(
        self,
        owner_id: str,
        title: str,
        username: str,
        secret: str,
        url: Optional[str] = None,
        notes: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> VaultItem:
        """
        Encrypt and store a new credential.

        Args:
            owner_id: Authenticated owner
            title: Entry title (e.g., "Gmail Account")
            username: Login name or email
            secret: Plaintext secret, encrypted before storage
            url: Optional website URL
            notes: Optional notes
            tags: Optional tags, order kept

        Returns:
            The stored item with the plaintext secret echoed back

        Raises:
            AuthError: No owner id
            ValidationError: title, username or secret is blank
            EncryptionError: Cipher failure
        """
        owner_id = self._require_owner(owner_id)
        self._validate(owner_id, title, username, secret)

        now = _now()
        record = SecretRecord(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            title=_trim(title),
            username=_trim(username),
            encrypted_secret=self._encrypt(owner_id, secret),
            url=_trim(url),
            notes=_trim(notes),
            tags=_trim_tags(tags),
            created_at=now,
            updated_at=now,
            key_version=self.cipher.key_version,
        )
        self.database.insert(record)

        self.logger.log_vault_event(
            event_type=EventType.VAULT_ITEM_CREATED,
            message=f"Item added to vault: {record.title}",
            owner_id=owner_id,
            details={"item_id": record.id, "tag_count": len(record.tags)},
        )
        return record.reveal(secret)

    def update_item(
        self,
        owner_id: str,
        item_id: str,
        title: str,
        username: str,
        secret: str,
        url: Optional[str] = None,
        notes: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> VaultItem:
        """
        Full-replace an owned item.

        Concurrent updates of the same item are last-write-wins.

        Raises:
            AuthError: No owner id
            ValidationError: title, username or secret is blank
            NotFoundError: No item with this id for this owner
            EncryptionError: Cipher failure
        """
        owner_id = self._require_owner(owner_id)
        self._validate(owner_id, title, username, secret)

        record = self.database.replace(
            owner_id,
            item_id,
            title=_trim(title),
            username=_trim(username),
            encrypted_secret=self._encrypt(owner_id, secret),
            key_version=self.cipher.key_version,
            url=_trim(url),
            notes=_trim(notes),
            tags=_trim_tags(tags),
            updated_at=_now(),
        )
        if record is None:
            raise self._not_found(owner_id, item_id, "Update")

        self.logger.log_vault_event(
            event_type=EventType.VAULT_ITEM_UPDATED,
            message=f"Item updated: {record.title}",
            owner_id=owner_id,
            details={"item_id": item_id},
        )
        return record.reveal(secret)

    def delete_item(self, owner_id: str, item_id: str) -> None:
        """
        Delete an owned item.

        Raises:
            AuthError: No owner id
            NotFoundError: No item with this id for this owner
        """
        owner_id = self._require_owner(owner_id)

        if not self.database.delete(owner_id, item_id):
            raise self._not_found(owner_id, item_id, "Delete")

        self.logger.log_vault_event(
            event_type=EventType.VAULT_ITEM_DELETED,
            message="Item deleted from vault",
            owner_id=owner_id,
            details={"item_id": item_id},
        )
