from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, extra="ignore")

    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = Field("development", validation_alias="NODE_ENV")
    log_level: str = "INFO"

    storage_backend: Literal["memory", "sql", "mongo"] | None = None
    mongodb_uri: str | None = None
    mongodb_db: str = "eventdb"
    database_url: str | None = None

    cors_origins: str = "*"
    redis_url: str | None = None
    cache_ttl_seconds: int = 60

    @field_validator("storage_backend", mode="before")
    @classmethod
    def normalize_backend(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or ["*"]

    @property
    def resolved_backend(self) -> str:
        if self.storage_backend:
            return self.storage_backend
        if self.mongodb_uri:
            return "mongo"
        if self.database_url:
            return "sql"
        return "memory"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
