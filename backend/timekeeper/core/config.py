from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DATABASE_URL: str = "postgresql+asyncpg://timekeeper:timekeeper_secret@db:5432/timekeeper"
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15

    # IANA zone used when a team has no timezone of its own
    DEFAULT_TIMEZONE: str = "Europe/Paris"

    # Clock events inside an accepted leave period are left out of reports
    EXCLUDE_LEAVE_PERIODS: bool = True

    RUN_MIGRATIONS_ON_STARTUP: bool = True
    MIGRATIONS_CWD: str = "/app"


settings = Settings()
