from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from datetime import date
import os

load_dotenv()

class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./realest.db")

    # JWT
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

    # App
    APP_NAME: str = os.getenv("APP_NAME", "RealEst Listings API")
    DEBUG: bool = os.getenv("DEBUG", "True") == "True"
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")  # comma-separated

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "standard")  # "standard" or "json"

    # Search
    SEARCH_DEFAULT_PAGE_SIZE: int = int(os.getenv("SEARCH_DEFAULT_PAGE_SIZE", "20"))
    SEARCH_MAX_PAGE_SIZE: int = int(os.getenv("SEARCH_MAX_PAGE_SIZE", "50"))

    # Marketplace
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "NGN")
    PLATFORM_LAUNCH_DATE: date = date.fromisoformat(os.getenv("PLATFORM_LAUNCH_DATE", "2024-01-01"))

settings = Settings()
