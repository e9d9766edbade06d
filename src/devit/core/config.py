"""Core configuration management using pydantic-settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_VERSION = "0.1.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = "development"

    # Database
    database_url: str = "sqlite+aiosqlite:///./devit.db"
    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Valkey/Redis
    valkey_url: str = "redis://localhost:6379/0"
    explore_cache_ttl_seconds: int = 60

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: str = "http://localhost:3000"

    # Authentication
    jwt_secret: str = "your-super-secret-jwt-key"
    admin_jwt_secret: str = "your-super-secret-admin-key"
    jwt_algorithm: str = "HS256"
    user_token_ttl_hours: int = 24 * 7
    admin_token_ttl_hours: int = 24
    admin_username: str = "admin"
    admin_password: str = "admin123"
    bcrypt_rounds: int = 10

    # Companion backend probed by /health
    backend_api_url: str | None = None
    backend_health_timeout_seconds: float = 5.0

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # OpenTelemetry
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4317"
    otel_service_name: str = "devit-api"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def database_system(self) -> str:
        """Database backend name derived from the URL scheme (e.g. "postgresql")."""
        return self.database_url.split(":", 1)[0].split("+", 1)[0]


# Global settings instance
settings = Settings()
