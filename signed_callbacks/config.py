"""
Application Configuration - Pydantic Settings for type-safe config.

NO DICTIONARIES - All configuration is strongly typed.
FAIL FAST - The signing key is validated at startup, not per request.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Signing - NO DEFAULT for production safety
    app_key: str = ""
    previous_keys: str = ""  # Comma-separated keys still accepted during rotation

    # Callback route
    app_url: str = "http://localhost:8000"
    notification_path: str = "/v1/notifications/server"
    callback_url_ttl_seconds: int = 0  # 0 = callback URLs never expire

    # Compatibility mode: delegate verification to the route URL layer
    delegate_signature_validation: bool = False

    # Admin API key for the callback URL endpoint (empty = endpoint rejects all requests)
    admin_api_key: str = ""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_title: str = "Signed Callbacks API"
    api_version: str = "0.1.0"
    api_description: str = "Signed server-notification URLs for store platforms"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "signed-callbacks-api"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate critical configuration at startup.

        Without a signing key every generated URL is forgeable and every
        verification fails, so the app MUST NOT start.
        """
        errors: list[str] = []

        if not self.app_key:
            errors.append("APP_KEY is required but empty or missing")

        if not self.app_url.startswith(("http://", "https://")):
            errors.append(f"APP_URL must be an http(s) URL, got: {self.app_url[:20]}...")

        if self.callback_url_ttl_seconds < 0:
            errors.append("CALLBACK_URL_TTL_SECONDS cannot be negative")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - APPLICATION CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self

    @property
    def previous_key_list(self) -> list[str]:
        """Get previous signing keys, in the order they were configured."""
        keys = []
        for key in self.previous_keys.split(","):
            key = key.strip()
            if key and key != self.app_key and key not in keys:
                keys.append(key)
        return keys


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
