from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "RewardStore"
    APP_PORT: int = 9300
    DEBUG: bool = False
    SECRET_KEY: str = "rewardstore-secret-key-change-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7  # 1 week
    BCRYPT_ROUNDS: int = 12
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "rewardstore"
    POSTGRES_PORT: int = 5432
    DATABASE_URI: Optional[str] = None  # Full URL override, e.g. sqlite:///./rewardstore.db

    # Uploads
    UPLOAD_PATH: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # Business rules
    ALLOW_CANCEL_COMPLETED: bool = True  # Cancelling a completed order still refunds
    FIRST_USER_IS_ADMIN: bool = True

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URI:
            return self.DATABASE_URI
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    class Config:
        env_file = ".env"
        extra = "ignore"

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
