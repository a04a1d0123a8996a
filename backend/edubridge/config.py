"""Application settings and validation."""

import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}")
    return value


class Settings:
    ENV: str
    DB_HOST: str
    DB_PORT: int
    DB_NAME: str
    DB_USER: str
    DB_PASS: str
    DATABASE_URL: str
    DB_POOL_SIZE: int
    DB_CREATE_TABLES: bool
    HOST: str
    PORT: int
    UPLOAD_DIR: str
    MAX_UPLOAD_BYTES: int
    ALLOW_DEV_CORS: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DB_HOST = os.getenv("DB_HOST", "localhost")
        self.DB_PORT = _int_env("DB_PORT", 5432)
        self.DB_NAME = os.getenv("DB_NAME", "edubridge")
        self.DB_USER = os.getenv("DB_USER", "postgres")
        self.DB_PASS = os.getenv("DB_PASS", "postgres")
        self.DATABASE_URL = os.getenv("DATABASE_URL", "").strip()
        self.DB_POOL_SIZE = _int_env("DB_POOL_SIZE", 5)
        self.DB_CREATE_TABLES = os.getenv("DB_CREATE_TABLES", "true").lower() == "true"
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = _int_env("PORT", 5000)
        self.UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads/certificates")
        self.MAX_UPLOAD_BYTES = _int_env("MAX_UPLOAD_BYTES", 10 * 1024 * 1024)  # 10 MB default
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if not self.DATABASE_URL and not self.DB_NAME:
            raise RuntimeError("DB_NAME must be set when DATABASE_URL is not provided")
        if not self.UPLOAD_DIR.strip():
            raise RuntimeError("UPLOAD_DIR must not be empty")

    @property
    def database_url(self) -> str:
        """Return the SQLAlchemy URL, preferring an explicit `DATABASE_URL`."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg://{quote_plus(self.DB_USER)}:{quote_plus(self.DB_PASS)}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )


settings = Settings()
