# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./database_storefront.db"

    # Identity provider (Supabase Auth compatible). Left optional so a missing
    # value fails on the first auth call instead of at import time.
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    IDENTITY_TIMEOUT: float = 10.0

    FRONTEND_URL: Optional[str] = None

    # Anonymous visitor identity
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_HEADER_NAME: str = "X-Session-Id"
    SESSION_COOKIE_MAX_AGE: int = 10 * 365 * 24 * 3600

    CURRENCY: str = "USD"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
