"""
Application settings and configuration
"""
from functools import lru_cache
from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Basic app settings
    DEBUG: bool = Field(default=False)
    APP_NAME: str = Field(default="Clinic Notification Service")

    # Server settings
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)
    ALLOWED_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    # Appointment source (booking backend)
    APPOINTMENTS_API_URL: str = Field(default="http://localhost:3000")
    APPOINTMENTS_PATH: str = Field(default="/api/booked-services")
    FETCH_TIMEOUT_SECONDS: float = Field(default=5.0)

    # Notification behaviour
    CLINIC_TIMEZONE: str = Field(default="UTC")
    PRESERVE_READ_STATE: bool = Field(default=False)  # keep read markers across refreshes
    REMINDER_SINK: Literal["memory", "celery"] = Field(default="memory")

    # Redis settings
    REDIS_URL: str = Field(default="redis://localhost:6379/0")
    REDIS_MAX_CONNECTIONS: int = Field(default=50)

    # Celery settings
    CELERY_BROKER_URL: str = Field(default="redis://localhost:6379/1")
    CELERY_RESULT_BACKEND: str = Field(default="redis://localhost:6379/2")
    CELERY_TASK_SERIALIZER: str = Field(default="json")

    # Push delivery
    PUSH_GATEWAY_URL: Optional[str] = None
    PUSH_TIMEOUT_SECONDS: float = Field(default=10.0)

    # Monitoring settings
    LOG_LEVEL: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Convenience accessor for settings
settings = get_settings()
