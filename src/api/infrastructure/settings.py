"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Demo deployments should set the store URL and service key
explicitly.
"""

import re
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_CLIENT_CODE_PATTERN = re.compile(r"^[a-z0-9-]+$")

# Related-row lookups for one page are sent as a single in-list and must stay
# under the hosted store's default row limit (1000).
MAX_PAGE_SIZE = 100


class RemoteStoreSettings(BaseSettings):
    """Hosted database (PostgREST) connection settings.

    Environment variables:
        FLOWS_STORE_URL: Base URL of the hosted project (default: http://localhost:54321)
        FLOWS_STORE_SERVICE_KEY: Service role key sent as apikey and bearer token
        FLOWS_STORE_SCHEMA: Exposed schema name (default: api)
        FLOWS_STORE_TIMEOUT_SECONDS: HTTP timeout for a single call (default: 30)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOWS_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(
        default="http://localhost:54321",
        description="Base URL of the hosted database project",
    )
    service_key: SecretStr = Field(
        default=SecretStr(""),
        description="Service role key for the REST API",
    )
    db_schema: str = Field(
        default="api",
        description="Schema exposed through the REST API",
    )
    timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for a single store call",
        gt=0,
        le=300,
    )

    @property
    def rest_url(self) -> str:
        """REST endpoint root (without trailing slash)."""
        return f"{self.url.rstrip('/')}/rest/v1"


class PaginationSettings(BaseSettings):
    """Page sizes for the paginated dashboard views.

    Each size is at most MAX_PAGE_SIZE.

    Environment variables:
        FLOWS_PAGINATION_PEOPLE_PAGE_SIZE: People per page (default: 25)
        FLOWS_PAGINATION_PROCESSES_PAGE_SIZE: Offboarding processes per page (default: 20)
        FLOWS_PAGINATION_INITIAL_LOAD_SIZE: People loaded by the dashboard load (default: 50)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOWS_PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    people_page_size: int = Field(default=25, ge=1, le=MAX_PAGE_SIZE)
    processes_page_size: int = Field(default=20, ge=1, le=MAX_PAGE_SIZE)
    initial_load_size: int = Field(default=50, ge=1, le=MAX_PAGE_SIZE)


class DemoSettings(BaseSettings):
    """Demo data generation and local settings persistence.

    Environment variables:
        FLOWS_DEMO_BATCH_SIZE: Rows per insert batch (default: 100)
        FLOWS_DEMO_TARGET_PEOPLE: People generated by `populate run` (default: 1200)
        FLOWS_DEMO_DEFAULT_CLIENT_CODE: Tenant code used by the CLI (default: hygge-hvidlog)
        FLOWS_DEMO_SETTINGS_PATH: JSON file holding the persisted settings blob
        FLOWS_DEMO_SEED: Seed for deterministic row generation (default: 42)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLOWS_DEMO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    batch_size: int = Field(default=100, ge=1, le=1000)
    target_people: int = Field(default=1200, ge=0)
    default_client_code: str = Field(default="hygge-hvidlog")
    settings_path: Path = Field(
        default=Path.home() / ".flows-admin" / "settings.json",
        description="Location of the persisted settings blob",
    )
    seed: int = Field(default=42)

    @model_validator(mode="after")
    def validate_client_code(self) -> "DemoSettings":
        """Client codes are lowercase slugs in the clients table."""
        if not _CLIENT_CODE_PATTERN.match(self.default_client_code):
            raise ValueError(
                f"default_client_code ({self.default_client_code!r}) must contain "
                "only lowercase letters, digits and hyphens"
            )
        return self


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Flows Admin API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Minimum log level")

    @property
    def store(self) -> RemoteStoreSettings:
        """Get remote store settings."""
        return get_remote_store_settings()

    @property
    def pagination(self) -> PaginationSettings:
        """Get pagination settings."""
        return get_pagination_settings()

    @property
    def demo(self) -> DemoSettings:
        """Get demo settings."""
        return get_demo_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_remote_store_settings() -> RemoteStoreSettings:
    """Get cached remote store settings."""
    return RemoteStoreSettings()


@lru_cache
def get_pagination_settings() -> PaginationSettings:
    """Get cached pagination settings."""
    return PaginationSettings()


@lru_cache
def get_demo_settings() -> DemoSettings:
    """Get cached demo settings."""
    return DemoSettings()
