"""
Runtime configuration read from environment variables.

    DREAMLEAGUE_DB_PATH       sqlite file (default: <project root>/data/dreamleague.db)
    JWT_SECRET_KEY            signing key for API tokens
    DREAMLEAGUE_ADMIN_IDS     comma-separated user ids allowed to verify creators
                              and cancel tournaments; empty = every caller
    DREAMLEAGUE_LOG_LEVEL     DEBUG | INFO | WARNING ... (default INFO)
    DREAMLEAGUE_CORS_ORIGINS  comma-separated origins for the API
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class Settings:
    db_path: Path
    jwt_secret_key: str
    admin_ids: frozenset[str] = frozenset()
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    def is_admin(self, user_id: str) -> bool:
        # No admins configured: development mode, anyone may act as admin.
        if not self.admin_ids:
            return True
        return user_id in self.admin_ids

    @classmethod
    def from_env(cls) -> Settings:
        env = os.environ
        db_path = env.get("DREAMLEAGUE_DB_PATH", "").strip()
        cors = _split_csv(env.get("DREAMLEAGUE_CORS_ORIGINS", ""))
        return cls(
            db_path=Path(db_path) if db_path else _project_root() / "data" / "dreamleague.db",
            jwt_secret_key=env.get("JWT_SECRET_KEY", "dev-secret-change-in-production"),
            admin_ids=frozenset(_split_csv(env.get("DREAMLEAGUE_ADMIN_IDS", ""))),
            log_level=env.get("DREAMLEAGUE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            cors_origins=cors or list(DEFAULT_CORS_ORIGINS),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, read once from the environment."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        if not _settings.admin_ids:
            logger.warning("DREAMLEAGUE_ADMIN_IDS not set; every caller is treated as admin")
    return _settings


def reset_settings() -> None:
    """Forget cached settings so the next get_settings() re-reads the environment."""
    global _settings
    _settings = None


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level or get_settings().log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
