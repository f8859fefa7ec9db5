"""
Shared pytest fixtures for the passvault test suite.

The autouse fixture below isolates tests from live application data:
  - Audit logger -> temp directory (prevents test events in ./audit_logs)
"""

import pytest


@pytest.fixture(autouse=True)
def _isolate_audit_logs(tmp_path, monkeypatch):
    """Redirect the global AuditLogger to a temp directory for every test.

    Without this, any test that (directly or indirectly) calls
    ``get_audit_logger().log_event(...)`` writes into the real
    ``./audit_logs/`` directory.
    """
    import passvault.core.audit_log as audit_mod

    # Reset the singleton so the next call to get_audit_logger() creates
    # a fresh instance pointing at the temp directory.
    old_logger = audit_mod._audit_logger
    audit_mod._audit_logger = None

    orig_init = audit_mod.AuditLogger.__init__

    def patched_init(self, log_dir=None):
        orig_init(self, log_dir=log_dir or tmp_path / "audit_logs")

    monkeypatch.setattr(audit_mod.AuditLogger, "__init__", patched_init)

    yield

    if audit_mod._audit_logger is not None:
        audit_mod._audit_logger.close()
    audit_mod._audit_logger = old_logger


@pytest.fixture
def cipher():
    from passvault.vault import CipherEngine
    return CipherEngine("test-shared-key")


@pytest.fixture
def database(tmp_path):
    from passvault.vault import VaultDatabase
    return VaultDatabase(str(tmp_path / "vault.db"))


@pytest.fixture
def store(database, cipher):
    from passvault.vault import VaultStore
    return VaultStore(database, cipher)
