import os
from functools import lru_cache
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class GlobalConfig(BaseConfig):
    DATABASE_URI: Optional[str] = None
    SECRET_KEY: Optional[str] = None

    # Bearer tokens
    TOKEN_ALGORITHM: str = "HS256"
    TOKEN_TTL_HOURS: int = 100

    # attempts at a read-modify-write on one post before a conflict is reported
    CONFLICT_RETRIES: int = Field(default=3, ge=1)

    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    SENTRY_DSN: Optional[str] = None


class DevConfig(GlobalConfig):
    DATABASE_URI: Optional[str] = "sqlite:///./postboard-dev.db"
    SECRET_KEY: Optional[str] = "dev-secret-key"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="DEV_", extra="ignore")


class ProdConfig(GlobalConfig):
    # hosting platforms usually inject DATABASE_URL; PROD_* names are accepted too
    DATABASE_URI: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("DATABASE_URL", "PROD_DATABASE_URI")
    )
    SECRET_KEY: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SECRET_KEY", "PROD_SECRET_KEY")
    )
    SENTRY_DSN: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SENTRY_DSN", "PROD_SENTRY_DSN")
    )
    CONFLICT_RETRIES: int = Field(
        default=3, ge=1, validation_alias=AliasChoices("CONFLICT_RETRIES", "PROD_CONFLICT_RETRIES")
    )


class TestConfig(GlobalConfig):
    DATABASE_URI: str = "sqlite:///test.db"
    SECRET_KEY: str = "test-secret-key-change-in-production"

    model_config = SettingsConfigDict(env_prefix="TEST_", extra="ignore")


def detect_env_state() -> str:
    env_state = os.getenv("ENV")
    if not env_state and os.getenv("PYTEST_CURRENT_TEST"):
        env_state = "test"
    return env_state or "prod"


@lru_cache()
def get_config(env_state: str) -> GlobalConfig:
    configs = {"dev": DevConfig, "test": TestConfig, "prod": ProdConfig}
    return configs[env_state]()


config = get_config(detect_env_state())
