"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: major.minor.patch)
    VERSION: str = "0.1.0"

    # Database
    DATABASE_URL: str = "sqlite:///./groomypaws.db"

    # Session Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_EXPIRES_DAYS: int = 7

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Uploads (served at /uploads)
    UPLOAD_DIR: str = "uploads"
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024

    # Email channel (disabled when SMTP_HOST is empty)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_SECURE: bool = False  # True = implicit TLS (port 465)
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "no-reply@groomypaws.com"

    # SMS channel (disabled when empty)
    SMS_WEBHOOK_URL: str = ""
    SMS_WEBHOOK_TIMEOUT_SECONDS: float = 10.0

    # Automation worker
    AUTOMATION_POLL_INTERVAL_SECONDS: int = 15
    SLA_EVALUATION_INTERVAL_SECONDS: int = 60
    AUTOMATION_BATCH_SIZE: int = 10

    # Booking
    BOOKING_ENFORCE_SLOT_CONFLICTS: bool = True
    # Availability hours are wall-clock times in this zone
    BUSINESS_TIMEZONE: str = "UTC"

    # Observability
    SENTRY_DSN: str = ""

    # Rate limiting (requests per minute)
    RATE_LIMIT_AUTH: int = 10
    RATE_LIMIT_API: int = 300

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Secrets to try when decoding, current first."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.SMTP_HOST)

    @property
    def sms_enabled(self) -> bool:
        return bool(self.SMS_WEBHOOK_URL)


settings = Settings()
