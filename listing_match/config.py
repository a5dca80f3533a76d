from pydantic_settings import BaseSettings
from pydantic import field_validator
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/listing_match"
    DB_SSL: bool = True
    REDIS_URL: str = "redis://localhost:6379/0"
    USER_MANAGEMENT_URL: str = "http://user-management:8000"
    GEMINI_API_KEY: str = "your_gemini_key"
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_FALLBACK_MODEL: str = "gemini-1.5-flash-latest"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @field_validator("DATABASE_URL")
    def use_asyncpg_driver(cls, v):
        """
        Points plain postgres URLs at the asyncpg driver and drops the libpq-only
        sslmode argument; SSL is configured through DB_SSL instead.
        """
        if not v:
            return v
        try:
            url = make_url(v)
        except Exception:
            # Leave unparseable values for the engine to report
            return v
        if url.drivername in ("postgres", "postgresql", "postgresql+psycopg2"):
            url = url.set(drivername="postgresql+asyncpg")
        if "sslmode" in url.query:
            url = url.difference_update_query(["sslmode"])
        return url.render_as_string(hide_password=False)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
