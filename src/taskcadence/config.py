"""Application configuration using Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="TaskCadence", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Environment"
    )

    # Database
    database_url: str = Field(
        default="sqlite:///./taskcadence.db",
        description="Database connection URL (PostgreSQL or SQLite)",
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size")
    db_max_overflow: int = Field(default=10, description="Database max overflow connections")
    db_echo: bool = Field(default=False, description="Echo SQL statements")

    # Scheduling
    practice_timezone: str = Field(
        default="UTC", description="IANA timezone the practice's calendar days are counted in"
    )
    generator_max_workers: int = Field(
        default=1, ge=1, description="Worker threads used to evaluate rules in one run"
    )
    preview_horizon_days: int = Field(
        default=800, ge=1, description="Days scanned when previewing upcoming occurrences"
    )

    # OpenTelemetry
    otel_enabled: bool = Field(default=False, description="Enable OpenTelemetry")
    otel_service_name: str = Field(default="taskcadence", description="Service name for traces")
    otel_exporter_otlp_endpoint: str = Field(
        default="http://localhost:4318", description="OTLP exporter endpoint"
    )
    otel_exporter_otlp_headers: str = Field(
        default="", description="OTLP headers (comma-separated key=value pairs)"
    )
    otel_resource_attributes: str = Field(
        default="", description="Resource attributes (comma-separated key=value pairs)"
    )
    otel_traces_exporter: Literal["otlp", "console", "none"] = Field(
        default="otlp", description="Traces exporter"
    )
    otel_metrics_exporter: Literal["otlp", "console", "none"] = Field(
        default="otlp", description="Metrics exporter"
    )

    def get_otlp_headers(self) -> dict[str, str]:
        """Parse OTLP headers from comma-separated string."""
        if not self.otel_exporter_otlp_headers:
            return {}
        return dict(
            item.split("=", 1)
            for item in self.otel_exporter_otlp_headers.split(",")
            if "=" in item
        )

    def get_resource_attributes(self) -> dict[str, str]:
        """Parse resource attributes from comma-separated string."""
        if not self.otel_resource_attributes:
            return {}
        return dict(
            item.split("=", 1) for item in self.otel_resource_attributes.split(",") if "=" in item
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
