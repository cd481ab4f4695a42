# tawsila_admin/core/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
import logging
from functools import lru_cache

# Configure logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Application info
    PROJECT_NAME: str = "Tawsila Admin Console"
    API_V1_STR: str = "/api/v1"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Admin console for orders, finance and vendor administration"

    # Remote platform API
    API_BASE_URL: str = "http://127.0.0.1:8000/api"
    TRACKING_API_KEY: str = ""
    HTTP_TIMEOUT: float = 10.0  # seconds
    HTTP_MAX_CONNECTIONS: int = 100
    HTTP_MAX_KEEPALIVE: int = 20

    # Locale sent to the platform API
    DEFAULT_LOCALE: str = "en"
    SUPPORTED_LOCALES: List[str] = ["en", "ar"]

    # Pagination settings
    DEFAULT_PAGE_SIZE: int = 24  # Same page size for every list in the console
    MAX_PAGE_SIZE: int = 100

    # Session settings
    TOKEN_COOKIE_NAME: str = "access_token"
    TOKEN_EXPIRE_DAYS: int = 7
    COOKIE_SECURE: bool = False  # Set to True in production with HTTPS
    COOKIE_DOMAIN: Optional[str] = None

    # Redis settings (cached user objects)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_URL: Optional[str] = None
    REDIS_TTL: int = 7 * 24 * 3600  # Matches the token cookie lifetime
    REDIS_KEY_PREFIX: str = "tawsila"
    REDIS_RETRY_INTERVAL: int = 30  # Seconds before a degraded cache tries Redis again

    # Server settings
    HOST: str = "0.0.0.0"
    PORT: int = 8001
    LOG_LEVEL: str = "INFO"

    # CORS settings
    CORS_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_CREDENTIALS: bool = True

    # Debug options
    DEBUG: bool = False

    @property
    def REDIS_CONNECTION_STRING(self) -> str:
        """Build Redis connection string"""
        if self.REDIS_URL:
            return self.REDIS_URL

        auth_part = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth_part}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @property
    def TOKEN_MAX_AGE(self) -> int:
        """Token cookie lifetime in seconds"""
        return self.TOKEN_EXPIRE_DAYS * 24 * 60 * 60

    def normalize_locale(self, locale: Optional[str]) -> str:
        """Return a supported locale, falling back to the default one"""
        if locale in self.SUPPORTED_LOCALES:
            return locale
        return self.DEFAULT_LOCALE

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=True,
        extra="ignore"
    )


# Cache the settings instance
@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Create settings instance for import
settings = get_settings()
