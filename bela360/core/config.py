from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite:///./bela360.db"
    DATABASE_ECHO: bool = False
    REDIS_URL: str | None = None  # unset -> in-process store

    CONVERSATION_TTL_SECONDS: int = 30 * 60
    CONVERSATION_KEY_NAMESPACE: str = "conversation"

    SLOT_INTERVAL_MINUTES: int = 30
    AVAILABLE_DATES_DEFAULT_DAYS: int = 14
    AVAILABLE_DATES_MAX_DAYS: int = 60

    BUSINESS_TIMEZONE: str = "America/Sao_Paulo"


settings = Settings()
