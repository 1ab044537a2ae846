from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=True)

    ENVIRONMENT: str = "development"

    # Session settings
    SESSION_ID_BYTES: int = 4  # 8 hex characters
    SESSION_IDLE_TIMEOUT_SECONDS: int = 600
    SESSION_SWEEP_INTERVAL_SECONDS: int = 60

    # Pages that consume the share links returned on session creation
    PRODUCER_PATH: str = "/laptop"
    CONSUMER_PATH: str = "/mobile"

    CORS_ALLOW_ORIGINS: list[str] = ["*"]

    # Logging settings
    LOG_LEVEL: str = "INFO"
    # Paths to exclude from access logs (e.g., /metrics, /health)
    LOG_EXCLUDED_PATHS: list[str] = ["/metrics", "/health"]

    # Loki settings
    LOKI_ENABLED: bool = False
    LOKI_URL: str = "http://loki:3100"
    LOKI_VERSION: str = "1"


app_settings = Settings()
