import json
from functools import lru_cache
from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration driven by environment variables."""

    environment: str = "development"
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:8000"
    create_path: str = "/api/v1/customers/new"
    list_path: str = "/api/v1/customers/all"
    crm_push_url: str = "http://localhost:8000/api/customers/push-to-crm"
    request_timeout: float = 10.0
    default_country: str = "IN"
    integration: Literal["crm", "google_sheets"] = "crm"
    google_service_account_json: str | None = None
    google_sheet_id: str | None = None
    google_sheet_worksheet: str | None = None

    model_config = SettingsConfigDict(env_file=".env", env_prefix="CUSTOMER_INTAKE_", case_sensitive=False)

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be greater than zero")
        return value

    @field_validator("default_country")
    @classmethod
    def normalize_country(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def google_sheets_enabled(self) -> bool:
        return bool(self.google_sheet_id and self.google_service_account_json)

    @property
    def google_service_account_info(self) -> dict[str, Any]:
        if not self.google_service_account_json:
            raise ValueError("google_service_account_json is not configured")
        try:
            return json.loads(self.google_service_account_json)
        except json.JSONDecodeError as exc:
            raise ValueError("google_service_account_json is not valid JSON") from exc


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
