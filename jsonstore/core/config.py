"""Environment-driven configuration with Pydantic v2."""

from typing import Literal, Optional
from pathlib import Path
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

MAX_TTL = 100 * 365 * 24 * 3600  # seconds, about a century


class Settings(BaseSettings):
    """Store settings, read from ``JSONSTORE_*`` environment variables."""

    # Database Configuration
    database_url: str = Field(default="sqlite+aiosqlite:///./data/jsonstore.db")
    database_echo: bool = Field(default=False)
    database_pool_size: int = Field(default=20, ge=1, le=100)
    database_max_overflow: int = Field(default=30, ge=0, le=100)

    # Store
    default_ttl: int = Field(default=0, ge=0, le=MAX_TTL)  # 0 = never expires

    # Expired entry sweeper
    sweeper_enabled: bool = Field(default=True)
    sweeper_interval: int = Field(default=3600, ge=1)
    sweeper_run_on_init: bool = Field(default=True)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure database directory exists for SQLite."""
        if v and v.startswith("sqlite") and ":memory:" not in v:
            if ":///" in v:
                db_path = v.split("///")[1]
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = {
        "env_prefix": "JSONSTORE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }
