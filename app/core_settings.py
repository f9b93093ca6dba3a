from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    SERVICE_NAME: str = "sello-backend"
    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # DATABASE_URL wins over the individual POSTGRES_* parts
    DATABASE_URL: Optional[str] = None
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "sello"
    POSTGRES_USER: str = "sello"
    POSTGRES_PASSWORD: str = "sello"
    RUN_MIGRATIONS: bool = True

    # YooKassa
    PAYMENT_PROVIDER: str = "yookassa"  # "yookassa" | "fake"
    YOOKASSA_SHOP_ID: Optional[str] = None
    YOOKASSA_SECRET_KEY: Optional[str] = None
    YOOKASSA_RETURN_URL: Optional[str] = None
    YOOKASSA_API_URL: str = "https://api.yookassa.ru/v3"
    PAYMENT_TIMEOUT_SECONDS: float = 10.0
    CURRENCY: str = "RUB"
    VAT_CODE: int = 1
    PLACEHOLDER_EMAIL: str = "test@example.com"
    ORDER_ID_ATTEMPTS: int = 5

    # Verification + sessions
    VERIFICATION_CODE_TTL_MINUTES: int = 10
    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_TTL_MINUTES: int = 60 * 24 * 7

    # Outbound mail; without SMTP_HOST codes are only logged
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    MAIL_FROM: str = "no-reply@sello.market"
    MAIL_TIMEOUT_SECONDS: float = 10.0

    ADMIN_TOKEN: Optional[str] = None

    # JSON file with {"products": [...], "sellers": [...]}; bundled demo data otherwise
    CATALOG_PATH: Optional[str] = None

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

@lru_cache
def get_settings() -> Settings:
    return Settings()
