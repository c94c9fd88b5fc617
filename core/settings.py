from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, PostgresDsn, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CustomSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


class AppSettings(CustomSettings):
    ENVIRONMENT: Literal["local", "dev", "prod"] = Field(default="local")
    LOG_LEVEL: str = Field(default="INFO")
    JSON_LOGS: bool = Field(default=False)
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8000)


class PgDbSettings(CustomSettings):
    POSTGRES_ENGINE: str = Field(default="postgresql+asyncpg")
    POSTGRES_USER: str = Field(default="postgres")
    POSTGRES_PASSWORD: SecretStr = Field(default="postgres")
    POSTGRES_DB: str = Field(default="chat")
    POSTGRES_HOST: str = Field(default="localhost")
    POSTGRES_PORT: int = Field(default=5432)
    DATABASE_URL: PostgresDsn | str = Field(default="")
    AUTO_CREATE_SCHEMA: bool = Field(default=False)

    @model_validator(mode="before")
    def validate_postgres_dsn(cls, data: dict):
        if isinstance(data, dict) and not data.get("DATABASE_URL"):
            _built_uri = PostgresDsn.build(
                scheme=data.get("POSTGRES_ENGINE", "postgresql+asyncpg"),
                username=data.get("POSTGRES_USER", "postgres"),
                password=data.get("POSTGRES_PASSWORD", "postgres"),
                host=data.get("POSTGRES_HOST", "localhost"),
                port=int(data.get("POSTGRES_PORT", 5432)),
                path=data.get("POSTGRES_DB", "chat"),
            ).unicode_string()
            data["DATABASE_URL"] = _built_uri
        return data


class OpenAISettings(CustomSettings):
    """Configuration for the upstream chat model.

    Env vars:
    - OPENAI_API_KEY
    - OPENAI_BASE_URL (empty means the provider default endpoint)
    - OPENAI_MODEL
    - OPENAI_TEMPERATURE
    - OPENAI_TIMEOUT_SECONDS
    """

    OPENAI_API_KEY: SecretStr = Field(default="")
    OPENAI_BASE_URL: str = Field(default="")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini")
    OPENAI_TEMPERATURE: float = Field(default=0.7)
    OPENAI_TIMEOUT_SECONDS: float = Field(default=60.0, gt=0)


class ConversationSettings(CustomSettings):
    """Configuration for multi-turn conversations.

    Env vars:
    - HISTORY_WINDOW_SIZE
    - STORE_RETRY_ATTEMPTS
    - STORE_RETRY_BASE_DELAY_SECONDS
    """

    HISTORY_WINDOW_SIZE: int = Field(default=20, ge=1)
    STORE_RETRY_ATTEMPTS: int = Field(default=3, ge=1)
    STORE_RETRY_BASE_DELAY_SECONDS: float = Field(default=0.05, ge=0)


class Settings(BaseModel):
    APP: AppSettings = Field(default_factory=AppSettings)
    DATABASE: PgDbSettings = Field(default_factory=PgDbSettings)
    OPENAI: OpenAISettings = Field(default_factory=OpenAISettings)
    CONVERSATION: ConversationSettings = Field(default_factory=ConversationSettings)


@lru_cache
def get_settings() -> Settings:
    return Settings()


SETTINGS = get_settings()
