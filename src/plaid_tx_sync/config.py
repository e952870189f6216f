from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    plaid_client_id: str = Field(..., alias="PLAID_CLIENT_ID")
    plaid_secret: str = Field(..., alias="PLAID_SECRET")
    plaid_env: Literal["sandbox", "development", "production"] = Field(default="sandbox", alias="PLAID_ENV")

    # optional bootstrap for CLI use, normally set through the exchange endpoint
    plaid_access_token: Optional[str] = Field(default=None, alias="PLAID_ACCESS_TOKEN")
    plaid_item_id: Optional[str] = Field(default=None, alias="PLAID_ITEM_ID")

    client_name: str = Field(default="Plaid-Bank-Transfer", alias="PLAID_CLIENT_NAME")
    country_codes: list[str] = Field(default_factory=lambda: ["US", "IT"], alias="PLAID_COUNTRY_CODES")
    products: list[str] = Field(default_factory=lambda: ["transactions"], alias="PLAID_PRODUCTS")

    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=4001, alias="APP_PORT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    sync_retry_delay_seconds: float = Field(default=2.0, alias="SYNC_RETRY_DELAY_SECONDS")
    sync_max_not_ready_attempts: int = Field(default=30, alias="SYNC_MAX_NOT_READY_ATTEMPTS")
    sync_timeout_seconds: Optional[float] = Field(default=120.0, alias="SYNC_TIMEOUT_SECONDS")
    sync_dedupe: bool = Field(default=False, alias="SYNC_DEDUPE")
    sync_timezone: Optional[str] = Field(default=None, alias="SYNC_TIMEZONE")
    sync_default_days: int = Field(default=7, alias="SYNC_DEFAULT_DAYS")

    def validate_required(self) -> None:
        if not self.plaid_client_id or not self.plaid_secret:
            raise ValueError("PLAID_CLIENT_ID and PLAID_SECRET are required")

        if bool(self.plaid_access_token) != bool(self.plaid_item_id):
            raise ValueError("PLAID_ACCESS_TOKEN and PLAID_ITEM_ID must be set together")

        if self.sync_default_days < 0:
            raise ValueError("SYNC_DEFAULT_DAYS must be >= 0")


@lru_cache
def load_settings() -> Settings:
    settings = Settings()
    settings.validate_required()
    return settings
