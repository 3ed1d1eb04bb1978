from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

# Find .env file - check payfam/ directory first, then project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
APP_ENV = BASE_DIR / "payfam" / ".env"
ROOT_ENV = BASE_DIR / ".env"

# Use payfam/.env if it exists, otherwise try root .env
env_file = str(APP_ENV) if APP_ENV.exists() else (str(ROOT_ENV) if ROOT_ENV.exists() else ".env")


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Dues
    DUE_DAY_OF_MONTH: int = 5
    CURRENCY_LABEL: str = "Rs."
    ORGANIZATION_NAME: str = "PayFam"

    # Messaging
    PHONE_NUMBER_PATTERN: str = r"^\+92\d{10}$"
    WHATSAPP_BASE_URL: str = "https://wa.me"

    # Audit
    AUDIT_LOG_DIR: Optional[str] = None

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = env_file
        case_sensitive = True


settings = Settings()

# Derived paths
LOGS_DIR = Path(settings.AUDIT_LOG_DIR) if settings.AUDIT_LOG_DIR else BASE_DIR / "logs"
