"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./grouptrips.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7


class PaymentSettings(BaseModel):
    stripe_secret_key: Optional[str] = None
    payment_link: Optional[str] = None
    app_url: str = "http://localhost:5173"
    return_path: str = "/dashboard"
    currency: str = "eur"
    unit_amount: int = 2499
    product_name: str = "GroupTrips"
    product_description: str = (
        "Create a new group trip with unlimited members, AI ticket scanning, aftermovie generation, and more."
    )
    # how far back verify-by-actor looks for a paid checkout session
    actor_lookup_window_hours: int = 24
    actor_lookup_limit: int = 50


class CheckoutSettings(BaseModel):
    creation_timeout_seconds: float = 15.0
    join_code_length: int = 6
    join_code_alphabet: str = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
    join_code_max_attempts: int = 5
    local_store_dir: Path = Field(default=Path("storage/pending_intents"))


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "GroupTrips Checkout Service"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    payments: PaymentSettings = PaymentSettings()
    checkout: CheckoutSettings = CheckoutSettings()
    logging: LoggingSettings = LoggingSettings()

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def host(self) -> str:
        return self.server.host

    @property
    def port(self) -> int:
        return self.server.port

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes

    @property
    def return_url(self) -> str:
        return self.payments.app_url.rstrip("/") + self.payments.return_path


@lru_cache()
def get_settings() -> Settings:
    return Settings()
