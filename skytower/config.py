# Runtime configuration pulled from environment variables.
# Everything here is external to the core; create_app() receives a Settings instance.
from __future__ import annotations

import os
from typing import List, Optional

from pydantic import BaseModel


# Basic truthy parser for env flags (1, true, yes, on)
def _truthy(val: Optional[str]) -> bool:
    if val is None:
        return False
    return val.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _to_int(val: Optional[str], default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


# Parse CORS origins from a comma-separated env var.
# Note: '*' cannot be used with allow_credentials=True; we fall back to explicit localhost origins for dev.
def _parse_cors_origins(env_value: Optional[str]) -> List[str]:
    default_dev_origins = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    if not env_value:
        return default_dev_origins

    origins = [o.strip() for o in env_value.split(",") if o.strip()]
    if "*" in origins:
        return default_dev_origins

    return origins


def _parse_csv(env_value: Optional[str], default: List[str]) -> List[str]:
    items = [v.strip() for v in (env_value or "").split(",") if v.strip()]
    return items or default


class Settings(BaseModel):
    database_url: str = "sqlite:///./data.db"
    cors_origins: List[str] = []

    # Identity provider: HS256 tokens verify with the shared secret; for RS256/ES256
    # set the algorithms and the provider's PEM public key
    identity_secret: str = "dev-identity-secret-change-me"
    identity_algorithms: List[str] = ["HS256"]
    identity_public_key: str = ""
    identity_audience: Optional[str] = None
    identity_issuer: Optional[str] = None

    # Blank disables Stripe and switches the gateway to offline mode
    stripe_secret_key: str = ""

    redis_enabled: bool = False
    redis_url: str = "redis://localhost:6379/0"
    rate_limit_window_seconds: int = 60
    rate_limit_register_per_window: int = 5
    rate_limit_write_per_window: int = 30

    port: int = 3000

    @property
    def identity_key(self) -> str:
        """Key handed to the token verifier: the public key when configured, else the shared secret."""
        return self.identity_public_key or self.identity_secret

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./data.db"),
            cors_origins=_parse_cors_origins(os.getenv("CORS_ORIGINS")),
            identity_secret=os.getenv("SKYTOWER_IDENTITY_SECRET", "dev-identity-secret-change-me"),
            identity_algorithms=_parse_csv(os.getenv("SKYTOWER_IDENTITY_ALGORITHMS"), ["HS256"]),
            identity_public_key=os.getenv("SKYTOWER_IDENTITY_PUBLIC_KEY", "").replace("\\n", "\n").strip(),
            identity_audience=os.getenv("SKYTOWER_IDENTITY_AUDIENCE") or None,
            identity_issuer=os.getenv("SKYTOWER_IDENTITY_ISSUER") or None,
            stripe_secret_key=os.getenv("STRIPE_SECRET_KEY", "").strip(),
            redis_enabled=_truthy(os.getenv("REDIS_ENABLED", "false")),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            rate_limit_window_seconds=_to_int(os.getenv("RATE_LIMIT_WINDOW_SECONDS"), 60),
            rate_limit_register_per_window=_to_int(os.getenv("RATE_LIMIT_REGISTER_PER_WINDOW"), 5),
            rate_limit_write_per_window=_to_int(os.getenv("RATE_LIMIT_WRITE_PER_WINDOW"), 30),
            port=_to_int(os.getenv("PORT"), 3000),
        )
