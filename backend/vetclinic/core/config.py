"""Module: config."""

from pydantic_settings import BaseSettings

# Centralized runtime configuration loaded from environment variables.
class Settings(BaseSettings):
    # Primary SQLAlchemy connection string for the backend database.
    database_url: str
    # Browser origins allowed to call the API.
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Outbound notification service (booking reminders).
    notification_service_url: str = "http://localhost:8080"
    notification_timeout_seconds: float = 5.0
    notification_channel: str = "TELEGRAM"
    notification_booking_template: str = "telegram/daily_reminder"

    # Lifetime of opaque bearer tokens handed out at login/registration.
    access_token_ttl_minutes: int = 180

    # Per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    log_level: str = "INFO"
    log_level_sql: str = "WARNING"
    log_level_http: str = "WARNING"
    log_level_uvicorn: str = "INFO"

    # Default administrator created by the seed script.
    seed_admin_username: str = "admin"
    seed_admin_email: str = "admin@vetclinic.local"
    seed_admin_password: str = "Admin@123"

    # Configure pydantic-settings to also load values from local .env file.
    class Config:
        env_file = ".env"

# Global settings instance imported by app modules at runtime.
settings = Settings()
