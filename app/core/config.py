from functools import lru_cache
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Everything is read from the environment / .env file.
    Only DATABASE_URL and SECRET_KEY are mandatory.
    """

    # ── Database ──────────────────────────────────────────
    DATABASE_URL: str                     # postgresql+asyncpg:// (sqlite+aiosqlite:// for tests)
    DATABASE_SYNC_URL: str | None = None  # psycopg2 URL for Alembic; falls back to DATABASE_URL

    # ── Auth ──────────────────────────────────────────────
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # ── CORS ──────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # ── Runtime ───────────────────────────────────────────
    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Rules for new activity lists ──────────────────────
    # A coordinator can override both per list; existing lists keep theirs.
    DEFAULT_TOTAL_HOURS: int = 150
    DEFAULT_MAX_HOURS_PER_CATEGORY: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("DEFAULT_TOTAL_HOURS", "DEFAULT_MAX_HOURS_PER_CATEGORY")
    @classmethod
    def rules_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("list rule defaults must be positive")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def origins_list(self) -> list[str]:
        """ALLOWED_ORIGINS is comma separated; blanks are dropped."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def migrations_url(self) -> str:
        return self.DATABASE_SYNC_URL or self.DATABASE_URL


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
