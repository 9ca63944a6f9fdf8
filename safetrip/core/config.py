from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
import os


class Settings(BaseSettings):
    # Project information
    PROJECT_NAME: str = "SafeTrip Travel Safety API"
    API_V1_STR: str = ""
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Backend persistence service
    BACKEND_API_URL: str = os.getenv("BACKEND_API_URL", "http://localhost:5000")
    BACKEND_API_KEY: Optional[str] = os.getenv("BACKEND_API_KEY")
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", 10))

    # Redis (local key-value storage and Celery broker)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", 6379))
    REDIS_PASSWORD: Optional[str] = os.getenv("REDIS_PASSWORD")
    REDIS_DB: int = int(os.getenv("REDIS_DB", 0))
    REDIS_SOCKET_TIMEOUT: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", 2))
    STORAGE_NAMESPACE: str = "safetrip"

    # Feed cache expiration (in seconds)
    FEED_CACHE_EXPIRATION: int = int(os.getenv("FEED_CACHE_EXPIRATION", 300))

    # External feeds
    NEWS_API_URL: str = "https://gnews.io/api/v4"
    NEWS_API_KEY: str = os.getenv("NEWS_API_KEY", "your_news_api_key")
    EVENTS_API_URL: str = "https://www.eventbriteapi.com/v3"
    EVENTS_API_KEY: str = os.getenv("EVENTS_API_KEY", "your_events_api_key")
    EVENTS_SEARCH_RADIUS_KM: int = 25
    WEATHER_API_URL: str = "https://api.weatherapi.com/v1"
    WEATHER_API_KEY: str = os.getenv("WEATHER_API_KEY", "your_weather_api_key")
    WEATHER_FORECAST_DAYS: int = 3
    ALERT_AGENT_URL: str = os.getenv("ALERT_AGENT_URL", "http://localhost:5001")

    @field_validator("NEWS_API_KEY", "EVENTS_API_KEY", "WEATHER_API_KEY")
    @classmethod
    def validate_api_keys(cls, v: str, info: ValidationInfo) -> str:
        default_value = f"your_{info.field_name.lower()}"
        if v == default_value:
            if os.getenv("ENVIRONMENT", "development") == "production":
                raise ValueError(f"{info.field_name} must be set in production")
        return v

    # Per-process user sessions kept in memory
    SESSION_REGISTRY_SIZE: int = int(os.getenv("SESSION_REGISTRY_SIZE", 1000))

    # Notifications
    NOTIFICATIONS_PAGE_SIZE: int = 20

    # Premium trial
    TRIAL_DURATION_DAYS: int = 3

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")


settings = Settings()
