"""Application configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env.authstore", env_prefix="AUTHSTORE_", extra="ignore"
    )

    DB_URL: str = "sqlite+aiosqlite:///./auth.db"
    DB_ECHO: bool = False
    DB_POOL_TIMEOUT: float = 30.0

    AUTH_CODE_TTL: int = 300
    ACCESS_TOKEN_TTL: int = 3600
    REFRESH_TOKEN_TTL: int = 86400

    JTI_PRUNE_INTERVAL: float = 300.0

    PBKDF2_ITERATIONS: int = 390000

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True


settings = Settings()
