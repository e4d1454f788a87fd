"""Application configuration via Pydantic Settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # App
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Automatic detection on navigation
    AUTO_DETECT_PRODUCTS: bool = True
    AUTO_DETECT_KNOWN_STORES_ONLY: bool = False

    # Notifications
    PUSH_NOTIFICATIONS: bool = True
    PRICE_DROP_THRESHOLD: float = 5.0  # percent
    NOTIFICATION_TITLE_MAX_LENGTH: int = 80

    # Page fetching
    FETCH_TIMEOUT_SECONDS: float = 30.0
    FETCH_RATE_LIMIT_RPM: int = 10
    FETCH_USER_AGENT: str = ""  # Empty string rotates through the built-in pool

    @field_validator("PRICE_DROP_THRESHOLD")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Threshold is a percentage and must sit in [0, 100]."""
        if v < 0 or v > 100:
            raise ValueError(f"PRICE_DROP_THRESHOLD must be between 0 and 100, got {v}")
        return v


settings = Settings()
