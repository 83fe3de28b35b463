"""Configuration management using Pydantic Settings"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Backend collaborator
    backend_api_base: str = "http://localhost:8001"
    backend_mode: Literal["http", "fixture", "resilient"] = "resilient"

    # Service
    service_name: str = "ewa-gateway"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    record_max_retries: int = 3
    record_backoff_base: float = 0.5  # Exponential backoff base in seconds

    # Advance policy
    pay_period_policy: Literal["calendar_month", "payroll_day"] = "calendar_month"

    # Notifications
    notification_ttl_seconds: float = 5.0

    # Vouchers
    voucher_validity_days: int = 365

    # Step-up auth
    biometric_scan_seconds: float = 2.0


settings = Settings()
