from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # DB
    DATABASE_URL: str = "sqlite:///./database.db"

    # Venue wall clock; every rule time is interpreted in this zone
    VENUE_TIMEZONE: str = "UTC"

    # Logging / diagnostics
    LOG_LEVEL: str = "INFO"
    PRICE_CALC_WARN_MS: float = 30.0

    RULES_MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
