from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

# Values already present in the process environment win over .env
load_dotenv()


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'mongodb'
    - MONGODB_URI: connection string, required when PERSISTENCE_BACKEND=mongodb
    - MONGODB_DATABASE: database name. Default 'todo-app'
    - JWT_SECRET: shared secret used to sign identity tokens
    - TOKEN_TTL_SECONDS: identity token lifetime. Default 86400 (1 day)
    - SESSION_SECRET: secret for the flash-message session cookie
    - BCRYPT_ROUNDS: bcrypt cost factor. Default 12
    - COOKIE_SECURE: 'true' to mark the token cookie Secure (default: false)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: root log level. Default 'INFO'
    """

    persistence_backend: str = "memory"
    mongodb_uri: Optional[str] = None
    mongodb_database: str = "todo-app"
    jwt_secret: str = "secret"
    token_ttl_seconds: int = 24 * 60 * 60
    session_secret: str = "secret-session-key"
    bcrypt_rounds: int = 12
    cookie_secure: bool = False
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "mongodb"}:
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        mongodb_uri=os.getenv("MONGODB_URI") or None,
        mongodb_database=_get_env("MONGODB_DATABASE", "todo-app").strip(),
        jwt_secret=_get_env("JWT_SECRET", "secret"),
        token_ttl_seconds=_parse_int(_get_env("TOKEN_TTL_SECONDS", "86400"), 86400),
        session_secret=_get_env("SESSION_SECRET", "secret-session-key"),
        bcrypt_rounds=_parse_int(_get_env("BCRYPT_ROUNDS", "12"), 12),
        cookie_secure=_parse_bool(_get_env("COOKIE_SECURE", "false"), False),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
    )
