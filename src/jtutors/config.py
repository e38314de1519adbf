from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "JTutors"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 5000
    log_level: str = "INFO"

    database_url: str = "sqlite:///./data/jtutors.db"
    data_dir: Path = Path("./data")

    session_ttl_min: int = 720
    bcrypt_rounds: int = 12
    cors_origins: str = "http://localhost:3000"
    frontend_url: str = "http://localhost:3000"

    dashboard_redirect_path: str = "/tutor/dashboard"
    dashboard_redirect_delay_ms: int = 2000
    min_hourly_fee: float = 20.0
    max_hourly_fee: float = 500.0

    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    smtp_timeout_sec: int = 30
    mail_worker_threads: int = 2
    admin_payout_account_ref: str = ""

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return value

    @model_validator(mode="after")
    def validate_fee_range(self) -> Settings:
        if self.min_hourly_fee > self.max_hourly_fee:
            raise ValueError("min_hourly_fee must not exceed max_hourly_fee")
        return self

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
