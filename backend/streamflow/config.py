"""Application configuration"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = "sqlite:///./streamflow.db"

    # Sources
    proxy_base_url: str = "http://localhost:3000"
    audius_api_url: str = "https://api.audius.co/v1"
    enabled_sources: str = "youtube,soundcloud,audius"
    discovery_enabled: bool = True  # Lyrics, artist info, recommendations

    # Caching and upstream calls
    cache_ttl_seconds: float = 300.0  # 5 minutes
    provider_timeout_seconds: float | None = 15.0
    request_timeout_seconds: float = 10.0
    trending_limit: int = 20

    # Library
    history_retention_days: int = 30

    # API Configuration
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Server Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def enabled_sources_list(self) -> List[str]:
        """Parse enabled sources string into list, preserving order"""
        return [source.strip().lower() for source in self.enabled_sources.split(",") if source.strip()]


# Global settings instance
settings = Settings()
