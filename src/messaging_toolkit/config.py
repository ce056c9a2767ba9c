"""
Service configuration.

'Settings' is built once at start-up by 'Settings.from_env()' and passed down
explicitly: nothing reads the environment after that. The administrator
allow-list is part of the settings so it is an immutable value injected into
'AdminAggregator' rather than process-wide state.

Sources, in order of precedence:
    1  /secrets/<NAME>  (mounted secret files, only for secrets)
    2  environment variables
    3  a '.env' file in the working directory (never overrides the environment)

Environment variables:
    KV_STORE_URL         SQLAlchemy async URL, e.g. sqlite+aiosqlite:///chat.db.
                         Unset means an in-memory store (lost on restart).
    JWT_SECRET           Signing secret for bearer tokens. Required.
    TOKEN_TTL_SECONDS    Bearer token lifetime, default 3600.
    ADMIN_EMAILS         Comma-separated administrator emails.
    CORS_ORIGINS         Comma-separated allowed origins, default '*'.
    HOST / PORT          Bind address for 'messaging_toolkit.server'.
    LOG_LEVEL            loguru level, default INFO.
    MIN_PASSWORD_LENGTH  Minimum length for a new password, default 6.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

SECRETS_DIR = Path("/secrets")


def _get_secret(name: str, secrets_dir: Path = SECRETS_DIR) -> str:
    """Load a secret from a mounted secret file or an environment variable.

    Raises ValueError if neither is available.
    """
    secret_file = secrets_dir / name
    if secret_file.exists():
        return secret_file.read_text().strip()
    value = os.environ.get(name, "")
    if not value:
        raise ValueError(
            f"{name} not found. Either:\n"
            f"  - Mount it as a secret file at {secret_file}, or\n"
            f"  - Set the {name} environment variable."
        )
    return value


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """Immutable runtime configuration for the messaging service."""

    model_config = {"frozen": True}

    jwt_secret: str
    kv_store_url: str | None = None
    token_ttl_seconds: int = 3600
    admin_emails: frozenset[str] = Field(default_factory=frozenset)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    min_password_length: int = 6

    @field_validator("admin_emails", mode="before")
    @classmethod
    def _normalise_admin_emails(cls, value: object) -> frozenset[str]:
        if isinstance(value, str):
            value = _split_csv(value)
        return frozenset(str(email).strip().lower() for email in value or [])  # type: ignore[union-attr]

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "Settings":
        load_dotenv(env_file or Path.cwd() / ".env", override=False)
        return cls(
            jwt_secret=_get_secret("JWT_SECRET"),
            kv_store_url=os.environ.get("KV_STORE_URL") or None,
            token_ttl_seconds=int(os.environ.get("TOKEN_TTL_SECONDS", "3600")),
            admin_emails=os.environ.get("ADMIN_EMAILS", ""),
            cors_origins=_split_csv(os.environ.get("CORS_ORIGINS", "*")),
            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "8000")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            min_password_length=int(os.environ.get("MIN_PASSWORD_LENGTH", "6")),
        )
