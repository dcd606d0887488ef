"""Configuration management for taskcore."""

from pathlib import Path

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

    # SQLite Configuration
    sqlite_db_path: str = Field(default="./data/taskcore.db", description="Path to the SQLite database file")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    environment: str = Field(default="development", description="Deployment environment name")

    # Pagination Configuration
    default_page_size: int = Field(default=10, ge=1, description="Page size used when a list request omits limit")
    max_page_size: int = Field(default=100, ge=1, description="Upper bound that list request limits are clamped to")

    @property
    def is_production(self) -> bool:
        """Whether the app runs in production."""
        return self.environment.lower() == "production"


# Application Constants
class Constants:
    """Application-wide constants."""

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_CREATED: int = 201
    HTTP_BAD_REQUEST: int = 400
    HTTP_NOT_FOUND: int = 404
    HTTP_CONFLICT: int = 409
    HTTP_SERVER_ERROR: int = 500

    # Pagination
    DEFAULT_PAGE: int = 1
    MIN_PAGE_SIZE: int = 1
    # Largest offset SQLite can bind (signed 64-bit INTEGER)
    MAX_OFFSET: int = 2**63 - 1

    # Sortable task fields keyed by public name
    SORTABLE_FIELDS: dict[str, str] = {  # noqa: RUF012
        "createdAt": "created_at",
        "dueDate": "due_date",
        "title": "title",
        "status": "status",
    }
    DEFAULT_SORT_KEY: str = "created_at"

    # Filterable task fields (equality only)
    FILTERABLE_FIELDS: frozenset[str] = frozenset({"status"})

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
