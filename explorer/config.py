import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./explorer.db")
    CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", 30))
    CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", 200))
    MAX_PAGE_LIMIT = int(os.getenv("MAX_PAGE_LIMIT", 1000))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "")
    DEBUG = os.getenv("DEBUG", "False").lower() == "true"
    APP_VERSION = os.getenv("APP_VERSION", "0.1.0")


settings = Settings()
