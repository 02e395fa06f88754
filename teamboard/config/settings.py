# teamboard/config/settings.py
# Environment-driven configuration for the API, the database and the auth layer

import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings:
    """Application settings read from the environment (and a local .env file)"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./teamboard.db")
    DATABASE_SSLMODE: str = os.getenv("DATABASE_SSLMODE", "require")

    # Principal tokens
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-in-production")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

    # Password hashing
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", 12))

    # Domain policies
    EMAIL_UNIQUENESS_CASE_INSENSITIVE: bool = _env_bool("EMAIL_UNIQUENESS_CASE_INSENSITIVE")
    ENFORCE_ASSIGNEE_MEMBERSHIP: bool = _env_bool("ENFORCE_ASSIGNEE_MEMBERSHIP")

    # Pagination
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", 10))
    MAX_PAGE_SIZE: int = int(os.getenv("MAX_PAGE_SIZE", 100))

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    RELOAD: bool = _env_bool("RELOAD", "true")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
        ).split(",")
        if origin.strip()
    ]

    def is_postgres(self) -> bool:
        return self.DATABASE_URL.lower().startswith("postgres")

    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.lower().startswith("sqlite")


settings = Settings()
