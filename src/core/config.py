from decimal import Decimal
from typing import Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ASYNC_DRIVER = "postgresql+asyncpg://"
_SYNC_SCHEMES = ("postgres://", "postgresql://")


class Settings(BaseSettings):
    """Runtime settings, read from the environment or a local .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = f"{ASYNC_DRIVER}ledger:ledger@localhost:5432/construction_ledger"
    sql_echo: bool = False

    # Bearer tokens are issued upstream; only verification happens here
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15

    # App
    app_env: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    cors_allowed_origins: Union[str, list[str]] = "http://localhost:3000,http://localhost:5173"

    # Applied when a create request leaves them out
    default_vat_rate: Decimal = Field(Decimal("0.07"), ge=0, le=1)
    default_wht_rate: Decimal = Field(Decimal("0"), ge=0, le=1)
    default_line_unit: str = "unit"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_async_driver(cls, v):
        """Hosted Postgres hands out sync URLs; the engine needs asyncpg."""
        if not v:
            raise ValueError("DATABASE_URL is required")
        if isinstance(v, str):
            for scheme in _SYNC_SCHEMES:
                if v.startswith(scheme):
                    return ASYNC_DRIVER + v[len(scheme):]
        return v

    @field_validator("cors_allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper() or "INFO"
        return v


settings = Settings()
