from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- DB ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 5432
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DB_NAME: str = "abinote"
    # overrides the DB_* fields when set (sqlite in tests)
    DATABASE_URL: Optional[str] = None

    ENVIRONMENT: str = "development"

    # --- session / reset token ---
    SESSION_COOKIE_NAME: str = "sessionId"
    SESSION_EXPIRE_DAYS: int = 30
    RESET_TOKEN_EXPIRE_HOURS: int = 24
    FRONTEND_BASE_URL: str = "http://localhost:3000"
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # --- mail ---
    RESEND_API_KEY: str = ""
    MAIL_FROM: str = "AbiNote <no-reply@abinote.app>"
    MAIL_API_URL: str = "https://api.resend.com/emails"

    # --- logging ---
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.strip().lower() == "production"

settings = Settings()
