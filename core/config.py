"""
Application configuration management.

Uses pydantic-settings for type-safe environment variable parsing.
All configuration is centralized here to support dependency injection
and avoid scattering os.getenv() calls throughout the codebase.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with validation and type coercion.
    
    Values are loaded from environment variables or .env file.
    All fields have sensible defaults for local development.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # Storage Backend Selection
    # Options: "json", "memory"
    storage_backend: Literal["json", "memory"] = "json"
    
    # Location of the persisted users/pages document.
    # Keep it outside the source tree so deploys do not wipe runtime data.
    db_file: Path = Path("data") / "db.json"
    
    # Account seeded when the user collection is empty (demo credentials)
    seed_admin_username: str = "admin"
    seed_admin_password: str = "admin"
    seed_admin_email: str = "admin@example.com"
    
    # Server
    server_host: str = "0.0.0.0"
    server_port: int = 4000
    cors_origins: list[str] = ["*"]
    debug: bool = False
    
    # Observability
    log_level: str = "INFO"
    
    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    
    @property
    def is_development(self) -> bool:
        return self.environment == "development"
    
    @property
    def is_memory_storage(self) -> bool:
        """Check if using the process-local store."""
        return self.storage_backend == "memory"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings singleton.
    
    Use this function to get settings instance throughout the application.
    The @lru_cache ensures we only parse environment once.
    """
    return Settings()
