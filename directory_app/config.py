from pydantic_settings import BaseSettings, SettingsConfigDict


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
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "AI Tool Directory"
    app_version: str = "1.0.0"

    # Database
    database_url: str = "sqlite:///./tool_directory.db"

    # Identity: header carrying the authenticated user id
    identity_header: str = "X-User-Id"

    # Catalog
    all_tools_bucket: str = "All Tools"
    favorites_bucket: str = "My Favorites"
    uncategorized_label: str = "Uncategorized"

    # Analytics
    analytics_window_days: int = 30
    top_tools_limit: int = 10

    # Cache settings
    cache_backend: str = "memory"  # Options: "redis", "memory", "null"
    redis_url: str = "redis://localhost:6379/0"
    cache_ttl: int = 3600  # Cache TTL in seconds (1 hour)

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
