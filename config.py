from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Chat Quota API"
    ENVIRONMENT: str = "production"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

    # Database
    DATABASE_URL: str = "sqlite:///./chat_quota.db"
    DB_POOL_SIZE: Optional[int] = None

    # Quota
    FREE_MESSAGES_PER_MONTH: int = 3
    DEFAULT_HISTORY_LIMIT: int = 50

    # Renewal payments are simulated
    RENEWAL_PAYMENT_SUCCESS_RATE: float = 0.9

    # Simulated AI latency in seconds
    CHAT_RESPONSE_DELAY_MIN: float = 1.0
    CHAT_RESPONSE_DELAY_MAX: float = 3.0

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    TIMEZONE: str = "UTC"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", extra='ignore')

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

settings = Settings()
