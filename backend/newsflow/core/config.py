from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    PROJECT_NAME: str = "NewsFlow"
    API_STR: str = "/api"
    LOG_LEVEL: str = "INFO"

    # "sql" or "memory", fixed for the lifetime of the process
    STORAGE_BACKEND: str = "sql"

    POSTGRES_USER: str = "newsflow"
    POSTGRES_PASSWORD: str = "secure_password"
    POSTGRES_DB: str = "newsflow"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: str = "5432"

    DATABASE_URL: Optional[str] = None

    NEWS_API_KEY: str = ""
    NEWS_API_URL: str = "https://newsapi.org/v2"
    NEWS_API_TIMEOUT_SECONDS: float = 10.0

    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-1.5-pro"
    GEMINI_TIMEOUT_SECONDS: float = 60.0
    KEY_VALIDATION_TIMEOUT_SECONDS: float = 15.0
    # LENIENT accepts a well-formed key when the live probe is inconclusive, STRICT rejects it
    KEY_VALIDATION_POLICY: str = "LENIENT"

    SESSION_SECRET: str = "newsflow-session-secret-change-in-production"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24 * 7
    SESSION_HTTPS_ONLY: bool = False

    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/minute"
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            # SQLAlchemy no longer accepts the 'postgres://' scheme some providers hand out
            url = self.DATABASE_URL
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+psycopg://", 1)
            return url
        return f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
