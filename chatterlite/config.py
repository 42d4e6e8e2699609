# chatterlite/config.py
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    PROJECT_NAME: str = "ChatterLite API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Direct and group messaging with friend requests"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Auth is disabled (signed-out only) when SECRET_KEY is missing
    SECRET_KEY: str | None = None
    REFRESH_SECRET_KEY: str | None = None
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    STORE_BACKEND: Literal["memory", "database"] = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./chatterlite.db"
    SEED_DEMO_USERS: bool = False

    REDIS_HOST: str | None = None
    REDIS_PORT: int = 6379

    STORAGE_ROOT: str = "./uploads"
    STORAGE_BUCKET: str = "chat-files"
    STORAGE_PUBLIC_URL: str = "/files"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024

    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    @property
    def auth_configured(self) -> bool:
        return bool(self.SECRET_KEY)

    @property
    def redis_configured(self) -> bool:
        return bool(self.REDIS_HOST)
