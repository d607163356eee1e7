# hrms/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./hrms.db"

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and ("localhost" in v or v.startswith("sqlite")):
            raise ValueError("Production environment cannot use a local database!")
        return v

    # === JWT ===
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440
    TOKEN_COOKIE: str = "token"

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === Server ===
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    SSL_CERTFILE: Optional[str] = None
    SSL_KEYFILE: Optional[str] = None

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    LOG_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_BACKUP_COUNT: int = 10

    # === Security ===
    BCRYPT_ROUNDS: int = 12

    # === Seed ===
    SUPER_ADMIN_EMAIL: str = "admin@company.com"
    SUPER_ADMIN_PASSWORD: Optional[str] = None

    # === Business Rules ===
    KPI_BELOW_TARGET_FACTOR: float = 0.9
    KPI_ABOVE_TARGET_FACTOR: float = 1.1
    KRI_MEDIUM_RATIO: float = 0.7
    TASK_RISK_WINDOW_DAYS: int = 2
    METRIC_QUERY_LIMIT_DEFAULT: int = 100
    METRIC_QUERY_LIMIT_MAX: int = 1000
    KRA_SCORE_LIMIT_DEFAULT: int = 12

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a global settings instance
settings = Settings()
