from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEV_ORIGINS = "http://localhost:8000,http://127.0.0.1:8000,http://localhost:3000,http://127.0.0.1:3000"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "local"
    APP_NAME: str = "Eventtix"
    LOG_LEVEL: str = "INFO"
    # Comma-separated; empty means the local dev origins
    CORS_ORIGINS: str = ""
    # Ticket links and the QR verification URL are built from this
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # Admin auth
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    ADMIN_EMAIL: str = "admin@eventtix.local"
    ADMIN_PASSWORD: str = "admin12345"

    DATABASE_URL: str
    REDIS_URL: str = "redis://localhost:6379/0"

    # Uploaded receipts and the featured image
    MEDIA_LOCAL_DIR: str = "./data/media"
    GCS_BUCKET_NAME: str = ""
    GOOGLE_APPLICATION_CREDENTIALS: str = ""
    MAX_RECEIPT_BYTES: int = 10 * 1024 * 1024
    # Entries ending in /* match the whole family
    ALLOWED_RECEIPT_TYPES: str = "image/*,application/pdf"

    # Buyer emails. Disabled means logged as queued and left for the worker.
    EMAIL_ENABLED: bool = True
    EMAIL_MAX_ATTEMPTS: int = 5
    EMAIL_RETRY_INTERVAL_SECONDS: float = 120.0
    SMTP_HOST: str = "localhost"
    SMTP_PORT: int = 25
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "tickets@eventtix.local"
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""

    @field_validator("DATABASE_URL", mode="after")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgres:// URLs; SQLAlchemy wants postgresql+psycopg2://."""
        if v and v.startswith("postgres://"):
            return "postgresql+psycopg2://" + v[len("postgres://"):]
        return v

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in (self.CORS_ORIGINS or _DEV_ORIGINS).split(",") if o.strip()]


settings = Settings()
