"""
Environment configuration for the hotel booking API.
Values come from environment variables or a local .env file.
"""
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application
    APP_NAME: str = "Hotel Booking API"
    API_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Security (In production, these must come from env vars)
    SECRET_KEY: str = "your-secret-key-keep-it-secret"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Bootstrap administrator
    ADMIN_EMAIL: str = "admin@hotel.example"
    ADMIN_PASSWORD: str = "admin12345"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="standard", pattern="^(standard|json)$")

    # Booking engine policy
    BOOKING_BUFFER_HOURS: int = Field(default=2, ge=0)
    DEPOSIT_RATE: float = Field(default=0.2, ge=0, le=1)
    POINT_VALUE: int = Field(default=1000, ge=0)
    MAX_PAGE_SIZE: int = Field(default=10, ge=1)

    class Config:
        case_sensitive = True

    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """Cached settings instance"""
    return Settings()


settings = get_settings()
