from pydantic_settings import BaseSettings
from pydantic import model_validator
from urllib.parse import quote_plus
from typing import List
import os


class Settings(BaseSettings):
    APP_ENV: str = "local"

    # "file" keeps the whole ledger in one JSON snapshot, "sql" in database tables
    STORAGE_BACKEND: str = "file"
    DATA_FILE: str = os.path.join(os.path.expanduser("~"), ".ledger", "app-data.json")

    # Database URL - can be provided directly or constructed from components
    DATABASE_URL: str | None = None

    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = ""

    # Ledger defaults
    BASE_WEIGHT_UNIT: str = "ton"
    TIMEZONE: str = "Asia/Baghdad"

    # Other settings
    LOCAL_URL: str = "http://127.0.0.1:8000"
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env" if os.getenv("APP_ENV", "local") == "local" else ".env.prod"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @model_validator(mode='after')
    def construct_database_url(self):
        """Construct DATABASE_URL from components, falling back to a local SQLite file."""
        if not self.DATABASE_URL:
            if self.DB_NAME:
                # URL encode password to handle special characters
                password_part = f":{quote_plus(self.DB_PASSWORD)}" if self.DB_PASSWORD else ""
                self.DATABASE_URL = f"postgresql://{self.DB_USER}{password_part}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            else:
                self.DATABASE_URL = "sqlite:///./ledger.db"

        if self.STORAGE_BACKEND not in ("file", "sql"):
            raise ValueError("STORAGE_BACKEND must be either 'file' or 'sql'")
        return self

    @property
    def database_url(self) -> str:
        """Get DATABASE_URL as a guaranteed string."""
        assert self.DATABASE_URL is not None, "DATABASE_URL must be set"
        return self.DATABASE_URL


settings = Settings()
