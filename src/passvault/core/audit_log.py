# Core - Audit Logging
#
# Append-only structured log of every vault access and mutation.
# Events carry timestamps, owner context and record ids; secrets and
# ciphertexts are never written here.

import logging
import os
import socket
import sys
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import uuid4

import structlog


class EventType(str, Enum):
    """Types of events that can be logged."""
    # Vault Events
    VAULT_ITEM_CREATED = "vault.item.created"
    VAULT_ITEM_UPDATED = "vault.item.updated"
    VAULT_ITEM_DELETED = "vault.item.deleted"
    VAULT_ITEM_ACCESSED = "vault.item.accessed"
    VAULT_ITEMS_LISTED = "vault.items.listed"
    VAULT_ITEM_NOT_FOUND = "vault.item.not_found"
    VAULT_VALIDATION_FAILED = "vault.validation.failed"
    VAULT_ERROR = "vault.error"

    # Generator Events
    CREDENTIAL_GENERATED = "credential.generated"

    # System Events
    SYSTEM_START = "system.start"
    SYSTEM_STOP = "system.stop"

    # User Actions
    AUTH_FAILED = "auth.failed"


class EventSeverity(str, Enum):
    """
    Severity levels for audit events.

    - INFO: Normal activity
    - INVESTIGATE: Unusual but expected (bad input, unknown ids)
    - ALERT: Rejected access
    - CRITICAL: Cipher or storage failure
    """
    INFO = "info"
    INVESTIGATE = "investigate"
    ALERT = "alert"
    CRITICAL = "critical"


class AuditLogger:
    """
    Append-only audit logger for vault events.

    Features:
    - Structured JSON logging (structlog → stdlib logging)
    - Automatic timestamp and event ID
    - Daily log file under log_dir
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """
        Initialize audit logger.

        Args:
            log_dir: Directory for audit logs (default: ./audit_logs)
        """
        self.log_dir = Path(log_dir) if log_dir else Path("./audit_logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)

        structlog.configure(
            processors=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer()
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        self._file_handler: Optional[logging.Handler] = None
        self._setup_file_handler()

        self.logger = structlog.get_logger("passvault.audit")

    @property
    def log_file(self) -> Path:
        today = datetime.now().strftime("%Y-%m-%d")
        return self.log_dir / f"audit_{today}.log"

    def _setup_file_handler(self):
        """Attach a daily file handler to the audit logger."""
        file_handler = logging.FileHandler(self.log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))  # structlog handles formatting

        audit_logger = logging.getLogger("passvault.audit")
        audit_logger.addHandler(file_handler)
        audit_logger.setLevel(logging.INFO)
        self._file_handler = file_handler

    def close(self) -> None:
        """Detach and close the file handler."""
        if self._file_handler is not None:
            logging.getLogger("passvault.audit").removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None

    def log_event(
        self,
        event_type: EventType,
        severity: EventSeverity,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        user_context: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Log an event (append-only).

        Args:
            event_type: Type of event (from EventType enum)
            severity: Severity level (from EventSeverity enum)
            message: Human-readable event description
            details: Additional event details (never secrets)
            user_context: Owner context (owner_id, etc.)

        Returns:
            str: Event ID (UUID) for reference
        """
        event_id = str(uuid4())

        self.logger.info(
            "audit_event",
            event_id=event_id,
            event_type=event_type.value,
            severity=severity.value,
            message=message,
            timestamp=datetime.now(timezone.utc).isoformat(),
            details=details or {},
            user_context=user_context or self._get_default_user_context(),
        )

        return event_id

    def log_vault_event(
        self,
        event_type: EventType,
        message: str,
        owner_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        severity: EventSeverity = EventSeverity.INFO,
    ) -> str:
        """
        Log a vault event scoped to one owner.

        Args:
            event_type: Type of vault event
            message: Event description
            owner_id: Owner the operation ran for
            details: Additional details (never log actual secrets!)
            severity: Defaults to INFO

        Returns:
            str: Event ID
        """
        user_context = {"owner_id": owner_id} if owner_id else None
        return self.log_event(
            event_type=event_type,
            severity=severity,
            message=f"Vault: {message}",
            details=details,
            user_context=user_context,
        )

    def _get_default_user_context(self) -> Dict[str, Any]:
        """Get default context (OS user, hostname, platform)."""
        return {
            "os_user": os.getenv("USERNAME") or os.getenv("USER"),
            "hostname": socket.gethostname(),
            "platform": sys.platform,
        }


# Global logger instance
_audit_logger: Optional[AuditLogger] = None


def configure_audit_logger(log_dir: Optional[Path] = None) -> AuditLogger:
    """Replace the global audit logger with one writing to log_dir."""
    global _audit_logger
    if _audit_logger is not None:
        _audit_logger.close()
    _audit_logger = AuditLogger(log_dir=log_dir)
    return _audit_logger


def get_audit_logger() -> AuditLogger:
    """Get global audit logger (singleton pattern)."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger()
    return _audit_logger


def log_security_event(
    event_type: EventType,
    severity: EventSeverity,
    message: str,
    **kwargs
) -> str:
    """
    Convenience function for logging events.

    Usage:
        log_security_event(
            EventType.AUTH_FAILED,
            EventSeverity.ALERT,
            "Request without owner id",
            details={"path": "/api/vault/items"}
        )
    """
    return get_audit_logger().log_event(event_type, severity, message, **kwargs)
