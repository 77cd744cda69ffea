import os
from decimal import Decimal
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Always load .env from root
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))


class Settings(BaseSettings):
    JWT_SECRET: str = os.getenv("JWT_SECRET", "change-me")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")

    # Either a full DATABASE_URL or the individual postgres parts
    DATABASE_URL: Optional[str] = os.getenv("DATABASE_URL")
    DB_USER: str | None = os.getenv("DB_USER")
    DB_PASS: str | None = os.getenv("DB_PASS")
    DB_HOST: str | None = os.getenv("DB_HOST")
    DB_PORT: str | None = os.getenv("DB_PORT", "5432")
    DB_NAME: str | None = os.getenv("DB_NAME")

    # Paystack (payment gateway)
    PAYSTACK_SECRET_KEY: str = os.getenv("PAYSTACK_SECRET_KEY", "")
    PAYSTACK_BASE_URL: str = os.getenv(
        "PAYSTACK_BASE_URL", "https://api.paystack.co")
    PAYSTACK_TIMEOUT: int = int(os.getenv("PAYSTACK_TIMEOUT", 10))
    PAYSTACK_CURRENCY: str = os.getenv("PAYSTACK_CURRENCY", "NGN")

    # VTPass (utility vending)
    VTPASS_BASE_URL: str = os.getenv(
        "VTPASS_BASE_URL", "https://sandbox.vtpass.com/api")
    VTPASS_API_KEY: str = os.getenv("VTPASS_API_KEY", "")
    VTPASS_SECRET_KEY: str = os.getenv("VTPASS_SECRET_KEY", "")
    VTPASS_TIMEOUT: int = int(os.getenv("VTPASS_TIMEOUT", 30))

    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:8080")

    # Reject settlement when gateway amount drifts from the stored amount.
    # Unset means no cross-check.
    SETTLEMENT_AMOUNT_TOLERANCE: Optional[Decimal] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()


def build_database_url(cfg: Settings = settings) -> str:
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL
    if cfg.DB_HOST:
        return (
            f"postgresql+psycopg2://{cfg.DB_USER}:{cfg.DB_PASS}@{cfg.DB_HOST}:{cfg.DB_PORT}/{cfg.DB_NAME}"
        )
    return f"sqlite:///{os.path.join(BASE_DIR, 'tenancy.db')}"


DATABASE_URL = build_database_url()
