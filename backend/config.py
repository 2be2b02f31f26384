import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from dotenv import load_dotenv

from errors import ConfigError

load_dotenv(Path(__file__).resolve().parent / ".env")

DEFAULT_EMAIL_FROM = "noreply@phenixlog.com"

_ENV_NAMES = {
    "supabase_url": "SUPABASE_URL",
    "supabase_service_role_key": "SUPABASE_SERVICE_ROLE_KEY",
    "supabase_anon_key": "SUPABASE_ANON_KEY",
    "resend_api_key": "RESEND_API_KEY",
}


def _get_env(name: str) -> str | None:
    value = os.getenv(name)
    return value or None


def _get_list(name: str, fallback: str = "") -> List[str]:
    raw_value = os.getenv(name, fallback)
    if not raw_value:
        return []
    return [item.strip() for item in raw_value.split(",") if item.strip()]


def _get_bool(name: str, fallback: bool = False) -> bool:
    raw_value = os.getenv(name)
    if raw_value is None:
        return fallback
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    supabase_url: str | None = field(default_factory=lambda: _get_env("SUPABASE_URL"))
    supabase_service_role_key: str | None = field(
        default_factory=lambda: _get_env("SUPABASE_SERVICE_ROLE_KEY")
    )
    supabase_anon_key: str | None = field(
        default_factory=lambda: _get_env("SUPABASE_ANON_KEY")
    )
    resend_api_key: str | None = field(default_factory=lambda: _get_env("RESEND_API_KEY"))
    email_from: str = field(
        default_factory=lambda: os.getenv("EMAIL_FROM") or DEFAULT_EMAIL_FROM
    )
    auth_timeout_seconds: float = field(
        default_factory=lambda: float(os.getenv("AUTH_TIMEOUT_SECONDS", "10"))
    )
    order_line_atomic_upsert: bool = field(
        default_factory=lambda: _get_bool("ORDER_LINE_ATOMIC_UPSERT")
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    allowed_origins: List[str] = field(
        default_factory=lambda: _get_list("ALLOWED_ORIGINS", "*")
    )

    def require(self, name: str) -> str:
        """Return a configured value or fail the current request."""
        value = getattr(self, name)
        if not value:
            env_name = _ENV_NAMES.get(name, name.upper())
            raise ConfigError(f"{env_name} not configured")
        return value


settings = Settings()


def get_settings() -> Settings:
    return settings
