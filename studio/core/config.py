from pydantic_settings import BaseSettings, SettingsConfigDict

from studio.gateway.types import RetryPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # SQLite
    database_url: str = "sqlite:///./studio.db"

    # Defaults for the persisted AI settings row
    default_api_url: str = "https://api.openai.com/v1"
    default_model: str = "gpt-4o"

    # AI gateway
    gateway_timeout_seconds: float = 120.0
    gateway_max_retries: int = 3
    gateway_base_delay: float = 1.0  # seconds
    gateway_max_delay: float = 10.0  # seconds
    gateway_backoff_factor: float = 2.0

    # Generation parameters
    edit_max_tokens: int = 1000
    edit_temperature: float = 0.7
    style_max_tokens: int = 200
    style_temperature: float = 0.7

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "127.0.0.1"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.gateway_max_retries,
            base_delay=self.gateway_base_delay,
            max_delay=self.gateway_max_delay,
            backoff_factor=self.gateway_backoff_factor,
        )


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup."""
    errors: list[str] = []

    if settings.gateway_max_retries < 0:
        errors.append("GATEWAY_MAX_RETRIES must be >= 0")

    if settings.gateway_base_delay < 0 or settings.gateway_max_delay < 0:
        errors.append("GATEWAY_BASE_DELAY and GATEWAY_MAX_DELAY must be >= 0")

    if settings.gateway_backoff_factor < 1.0:
        errors.append("GATEWAY_BACKOFF_FACTOR must be >= 1.0")

    if settings.app_env == "production":
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
