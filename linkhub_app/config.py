from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import string
from urllib.parse import quote_plus


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    log_level: str = "INFO"

    # Application
    app_name: str = "LinkHub"
    app_version: str = "1.0.0"

    # Public base URL used to build shortUrl / hubUrl
    base_url: str = "http://127.0.0.1:8000"

    # Storage backend
    storage_backend: str = "sqlalchemy"  # Options: "sqlalchemy", "mongodb"
    database_url: str = "sqlite:///./linkhub.db"

    # MongoDB (used when storage_backend == "mongodb")
    mongo_uri: Optional[str] = None  # Takes precedence over the parts below
    mongo_host: str = "localhost"
    mongo_port: int = 27017
    mongo_database: str = "linkhub"
    mongo_user: Optional[str] = None
    mongo_password: Optional[str] = None
    mongo_auth_source: str = "admin"
    mongo_max_pool_size: int = 10
    mongo_server_selection_timeout_ms: int = 5000

    # Short name generation
    short_name_length: int = 8
    short_name_alphabet: str = string.ascii_letters + string.digits + "_-"
    max_name_attempts: int = 10

    # CORS (comma separated allow-list)
    cors_origin: str = "http://localhost:8080,http://localhost:8082"

    # Honour X-Forwarded-For when running behind a reverse proxy
    trust_proxy: bool = True

    # Rate limiting (fixed window, applied to /api)
    rate_limit_backend: str = "redis"  # Options: "redis", "memory"
    redis_url: str = "redis://localhost:6379/0"
    rate_limit_window_seconds: int = 900  # 15 minutes
    rate_limit_max_requests: int = 100

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]

    @property
    def resolved_mongo_uri(self) -> str:
        """
        MongoDB connection URI.

        An explicit MONGO_URI wins; otherwise the URI is built from the
        individual host/port/database/credential settings.
        """
        if self.mongo_uri:
            return self.mongo_uri

        if self.mongo_user and self.mongo_password:
            return (
                f"mongodb://{quote_plus(self.mongo_user)}:{quote_plus(self.mongo_password)}"
                f"@{self.mongo_host}:{self.mongo_port}/{self.mongo_database}"
                f"?authSource={self.mongo_auth_source}"
            )

        return f"mongodb://{self.mongo_host}:{self.mongo_port}/{self.mongo_database}"


# Create settings instance
settings = Settings()
