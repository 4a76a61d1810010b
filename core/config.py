"""
Configuration module for Vital Alerts Service.
Uses Pydantic BaseSettings for validation - app fails fast if required config is missing.
"""
import logging
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Invalid values cause the app to fail fast at import time.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    vitals_svc_db_dir: str = Field(default="data", description="Database directory")
    vitals_svc_db_file: str = Field(default="vitals.db", description="Database filename")
    vitals_svc_db_busy_timeout: int = Field(default=5000, description="SQLite busy timeout in milliseconds")

    # API Configuration
    vitals_svc_host: str = Field(default="0.0.0.0", description="API host")
    vitals_svc_port: int = Field(default=8000, description="API port")
    vitals_svc_reload: bool = Field(default=False, description="Enable hot reload")

    # Alerting Configuration
    vitals_svc_app_name: str = Field(
        default="HealthMate",
        min_length=1,
        description="Application name used in alert subjects and signatures"
    )
    vitals_svc_retention_days: int = Field(
        default=30,
        ge=1,
        description="Readings older than this many days are purged by the retention sweep"
    )

    # Email Relay Configuration
    email_relay_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the email-relay service exposing POST /send-email"
    )
    email_relay_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Email relay request timeout in seconds"
    )

    @model_validator(mode="after")
    def validate_relay(self) -> "Settings":
        """Warn at startup when alert delivery cannot work."""
        if not self.email_relay_url:
            logger.warning(
                "EMAIL_RELAY_URL not set - alert emails will be reported as failed; "
                "local notifications are still queued"
            )
        return self

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.vitals_svc_db_dir) / self.vitals_svc_db_file)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.vitals_svc_db_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if config is invalid
settings = Settings()

# Module-level exports
DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.vitals_svc_db_busy_timeout

API_HOST = settings.vitals_svc_host
API_PORT = settings.vitals_svc_port
API_RELOAD = settings.vitals_svc_reload

APP_NAME = settings.vitals_svc_app_name

EMAIL_RELAY_URL = settings.email_relay_url
EMAIL_RELAY_TIMEOUT = settings.email_relay_timeout
