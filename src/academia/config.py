"""Runtime configuration for Academia.

Settings are read from ``ACADEMIA_*`` environment variables, falling back to
the module defaults below.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_DB_PATH = "academia.db"
DEFAULT_BCRYPT_ROUNDS = 10
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_DIR = "logs"

ENV_PREFIX = "ACADEMIA_"


class ConfigError(Exception):
    """Raised when configuration is invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings.

    Attributes:
        db_path: SQLite database path, ":memory:" for an in-memory store.
        pool_teacher_id: Teacher assigned to automatically created groups.
            When unset, the earliest registered active teacher is used.
        bcrypt_rounds: Cost factor for password hashing.
        log_dir: Directory for rotating log files.
        log_level: Logging level name.
    """

    db_path: str = DEFAULT_DB_PATH
    pool_teacher_id: str | None = None
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    log_dir: str = DEFAULT_LOG_DIR
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a value cannot be parsed.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(f"{ENV_PREFIX}{name}")
            if value is None or not value.strip():
                return None
            return value.strip()

        rounds_raw = get("BCRYPT_ROUNDS")
        if rounds_raw is None:
            rounds = DEFAULT_BCRYPT_ROUNDS
        else:
            try:
                rounds = int(rounds_raw)
            except ValueError as e:
                raise ConfigError(
                    f"ACADEMIA_BCRYPT_ROUNDS must be an integer, got {rounds_raw!r}"
                ) from e
            if not 4 <= rounds <= 31:
                raise ConfigError(f"ACADEMIA_BCRYPT_ROUNDS must be between 4 and 31, got {rounds}")

        return cls(
            db_path=get("DB_PATH") or DEFAULT_DB_PATH,
            pool_teacher_id=get("POOL_TEACHER_ID"),
            bcrypt_rounds=rounds,
            log_dir=get("LOG_DIR") or DEFAULT_LOG_DIR,
            log_level=(get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )
