from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> List[str]:
    raw = os.environ.get(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_database: str = "DataBase"
    mongo_timeout_ms: int = 5000

    jwt_key: str = ""
    jwt_issuer: str = "soil-api"
    jwt_audience: str = "soil-client"
    jwt_expire_hours: int = 6

    bcrypt_rounds: int = 12
    require_auth: bool = False

    cors_origins: List[str] = field(default_factory=list)
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        jwt_key = os.environ.get("JWT_KEY", "")
        if not jwt_key:
            # Tokens issued with a per-process key stop validating after a restart.
            logger.warning("JWT_KEY is not set, using a random signing key for this process")
            jwt_key = secrets.token_urlsafe(32)

        log_dir = os.environ.get("LOG_DIR")

        return cls(
            mongo_uri=os.environ.get("MONGO_URI", cls.mongo_uri),
            mongo_database=os.environ.get("MONGO_DATABASE", cls.mongo_database),
            mongo_timeout_ms=int(os.environ.get("MONGO_TIMEOUT_MS", cls.mongo_timeout_ms)),
            jwt_key=jwt_key,
            jwt_issuer=os.environ.get("JWT_ISSUER", cls.jwt_issuer),
            jwt_audience=os.environ.get("JWT_AUDIENCE", cls.jwt_audience),
            jwt_expire_hours=int(os.environ.get("JWT_EXPIRE_HOURS", cls.jwt_expire_hours)),
            bcrypt_rounds=int(os.environ.get("BCRYPT_ROUNDS", cls.bcrypt_rounds)),
            require_auth=_env_bool("REQUIRE_AUTH"),
            cors_origins=_env_list("CORS_ORIGINS"),
            log_level=os.environ.get("LOG_LEVEL", cls.log_level).upper(),
            log_dir=Path(log_dir) if log_dir else None,
        )
