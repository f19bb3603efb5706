from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    APP_NAME: str = "Invoice Dashboard"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PORT: int = 8000

    POSTGRES_URL: str = ""
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 5
    DB_POOL_RECYCLE: int = 300
    DB_SSL: str = "require"

    AUTH_SECRET: str = ""
    AUTH_ALGORITHM: str = "HS256"
    SESSION_MAX_AGE_SECONDS: int = 30 * 24 * 60 * 60
    SESSION_COOKIE_NAME: str = "session"
    LOGIN_REDIRECT_PATH: str = "/dashboard"

    UPSTASH_REDIS_REST_URL: str = ""
    UPSTASH_REDIS_REST_TOKEN: str = ""
    PAGE_CACHE_TTL_SECONDS: int = 300

    INVOICES_PATH: str = "/dashboard/invoices"
    INVOICE_DELETE_ENABLED: bool = False

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cache_enabled(self) -> bool:
        return bool(self.UPSTASH_REDIS_REST_URL)

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
