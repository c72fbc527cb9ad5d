from typing import Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Shortlinks"

    DATABASE_URL: str = "sqlite:///./urls.db"

    HOST: str = "127.0.0.1"
    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    SHORT_ID_LENGTH: int = 4
    MAX_COLLISION_RETRIES: int = 5
    # Upper bound on reading a request body
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # Redirect cache is disabled when no redis url is given
    REDIS_URL: Optional[str] = None
    CACHE_TTL: int = 86400

    class Config:
        env_file = ".env"

settings = Settings()
