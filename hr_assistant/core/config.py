"""Application configuration via pydantic-settings.

Loads all settings from environment variables with sensible defaults.
A global `settings` singleton is available for import throughout the app.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase
    SUPABASE_URL: str
    SUPABASE_KEY: str
    STORE_TIMEOUT_SECONDS: float = 10.0
    STORE_READ_ATTEMPTS: int = 3

    # Scheduling policy defaults
    SLOT_DURATION_MINUTES: int = 30
    SCHEDULING_WEEKS_AHEAD: int = 4
    SCHEDULING_TIMEZONE: str = "UTC"
    DEDUPLICATE_OVERLAPPING_SLOTS: bool = True

    # SendGrid
    SENDGRID_API_KEY: str = ""
    SENDGRID_FROM_EMAIL: str = ""
    INTERVIEW_LOCATION: str = "Our office"
    EMAIL_SEND_DELAY_SECONDS: float = 0.5

    # Reminder job
    REMINDERS_ENABLED: bool = True
    REMINDER_HOUR: int = 8
    REMINDER_MINUTE: int = 0

    # CORS
    ALLOWED_ORIGINS: str = "*"

    # Logging
    LOG_LEVEL: str = "INFO"


settings = Settings()  # type: ignore[call-arg]
