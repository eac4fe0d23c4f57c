"""
Engine settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Contract generation defaults."""

    # Environment
    environment: str = "development"  # development, test, production
    debug: bool = False
    # Explicit override; empty falls back to DEBUG/INFO based on `debug`
    log_level: str | None = None

    # Field name policy
    # When True, references to fields that are absent from an entity raise.
    # When False, they are dropped and logged at debug level.
    strict_field_names: bool = True

    # Batch operations
    default_max_batch_size: int = 100

    # Pagination defaults
    default_page_limit: int = 10
    max_page_limit: int = 100
    search_page_limit: int = 20

    # Entity conventions
    timestamp_fields: list[str] = ["createdAt", "updatedAt"]
    soft_delete_field: str = "deletedAt"

    # Documentation export
    api_title: str = "CRUD Contracts"
    api_version: str = "1.0.0"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    def validate_settings(self) -> list[str]:
        """
        Check cross-field consistency of the configured defaults.

        Returns:
            List of human readable problems. Empty when the settings are usable.
        """
        errors = []

        if self.default_max_batch_size < 1:
            errors.append("DEFAULT_MAX_BATCH_SIZE must be at least 1")

        if self.default_page_limit < 1:
            errors.append("DEFAULT_PAGE_LIMIT must be at least 1")

        if self.default_page_limit > self.max_page_limit:
            errors.append("DEFAULT_PAGE_LIMIT must not exceed MAX_PAGE_LIMIT")

        if self.search_page_limit > self.max_page_limit:
            errors.append("SEARCH_PAGE_LIMIT must not exceed MAX_PAGE_LIMIT")

        if len(self.timestamp_fields) != 2:
            errors.append("TIMESTAMP_FIELDS must name exactly two fields (created, updated)")

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
