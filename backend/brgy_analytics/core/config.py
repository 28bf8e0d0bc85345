"""
Application Configuration

Loads settings from environment variables.
"""

from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase
    supabase_url: str = ""
    supabase_service_key: str = ""

    # Auth (HS256 secret used to sign dashboard tokens)
    jwt_secret: str = ""

    # Analytics
    analytics_top_n: int = 5
    recent_activity_days: int = 7
    # rapidfuzz ratio at which a non-matching barangay is reported as a likely typo
    barangay_near_miss_threshold: float = 85.0
    # Secondary gender source when the user record has none
    tenant_profile_collection: str = "tenants"

    # App Configuration
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: str = "http://localhost:8081,http://localhost:19006"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
