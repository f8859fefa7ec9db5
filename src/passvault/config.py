"""Service configuration: reads from environment variables.

A ``.env`` file in the working directory is loaded first (dev convenience);
real environment variables always win.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .vault.exceptions import ConfigurationError

ENV_PREFIX = "PASSVAULT_"


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one process."""
    encryption_key: str
    key_version: int = 1
    db_path: Path = Path("data/vault.db")
    audit_log_dir: Path = Path("./audit_logs")
    host: str = "127.0.0.1"
    port: int = 8000

    def __repr__(self) -> str:
        # Never echo the shared key
        return (
            f"Settings(key_version={self.key_version}, db_path={str(self.db_path)!r}, "
            f"audit_log_dir={str(self.audit_log_dir)!r}, host={self.host!r}, port={self.port})"
        )


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    dotenv_path: Optional[Path] = None,
) -> Settings:
    """
    Build Settings from the environment.

    Args:
        env: Mapping to read instead of os.environ (tests)
        dotenv_path: Explicit .env file; ignored when env is given

    Raises:
        ConfigurationError: Missing encryption key or malformed value
    """
    if env is None:
        load_dotenv(dotenv_path=dotenv_path, override=False)
        env = os.environ

    encryption_key = env.get(ENV_PREFIX + "ENCRYPTION_KEY", "")
    if not encryption_key:
        raise ConfigurationError(f"{ENV_PREFIX}ENCRYPTION_KEY is not set")

    return Settings(
        encryption_key=encryption_key,
        key_version=_int_setting(env, "KEY_VERSION", 1),
        db_path=Path(env.get(ENV_PREFIX + "DB_PATH") or "data/vault.db"),
        audit_log_dir=Path(env.get(ENV_PREFIX + "AUDIT_LOG_DIR") or "./audit_logs"),
        host=env.get(ENV_PREFIX + "HOST") or "127.0.0.1",
        port=_int_setting(env, "PORT", 8000),
    )
