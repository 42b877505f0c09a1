# checkout_api/settings.py
from __future__ import annotations
from typing import List, Optional
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict
import json

DEFAULT_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


def _parse_list(v: Optional[str | List[str]], default: List[str]) -> List[str]:
    """
    Accept JSON array (e.g. '["http://localhost:3000"]') or
    comma-separated string ('http://localhost:3000,http://127.0.0.1:3000').
    """
    if v is None:
        return list(default)
    if isinstance(v, list):
        return v
    s = v.strip()
    if not s:
        return list(default)
    # try JSON first
    try:
        parsed = json.loads(s)
        if isinstance(parsed, list) and all(isinstance(x, str) for x in parsed):
            return parsed
    except ValueError:
        pass
    # fallback: comma separated
    return [p.strip() for p in s.split(",") if p.strip()]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",   # ignore unknown env keys instead of raising
    )

    # --- API ---
    api_host: str = Field(default="127.0.0.1", validation_alias=AliasChoices("API_HOST",))
    api_port: int = Field(default=8000,        validation_alias=AliasChoices("API_PORT",))
    app_env: str = Field(default="development", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL",))
    client_url: str = Field(
        default="http://localhost:3000", validation_alias=AliasChoices("CLIENT_URL",)
    )
    cors_origins_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("CORS_ORIGINS",)
    )

    # --- Postgres ---
    database_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL",)
    )

    # --- Stripe ---
    stripe_secret_key: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("STRIPE_SECRET_KEY",)
    )
    stripe_webhook_secret: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("STRIPE_WEBHOOK_SECRET",)
    )
    currency: str = Field(default="usd", validation_alias=AliasChoices("CHECKOUT_CURRENCY",))
    shipping_countries_raw: Optional[str | List[str]] = Field(
        default=None, validation_alias=AliasChoices("SHIPPING_COUNTRIES",)
    )

    # --- Orders listing ---
    orders_default_limit: int = Field(
        default=50, validation_alias=AliasChoices("ORDERS_DEFAULT_LIMIT",)
    )
    orders_max_limit: int = Field(
        default=100, validation_alias=AliasChoices("ORDERS_MAX_LIMIT",)
    )

    @property
    def cors_origins(self) -> List[str]:
        origins = _parse_list(self.cors_origins_raw, DEFAULT_ORIGINS)
        if self.client_url and self.client_url not in origins:
            origins.append(self.client_url)
        return origins

    @property
    def shipping_countries(self) -> List[str]:
        return [c.upper() for c in _parse_list(self.shipping_countries_raw, ["US", "CA", "GB", "AU", "IN"])]

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"

# singleton
settings = Settings()
