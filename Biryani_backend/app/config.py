from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_PATH: str = "biryani.db"
    DATABASE_ECHO: bool = False

    # Realtime
    REALTIME_ENABLED: bool = True

    ANONYMOUS_USER_NAME: str = "Anonymous User"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def cors_origins(self) -> list[str]:
        return [item.strip() for item in (self.CORS_ORIGINS or "").split(",") if item.strip()] or ["*"]


settings = Settings()
