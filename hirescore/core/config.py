"""Application configuration management."""

from pydantic import AnyUrl, ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: AnyUrl

    # AI gateway (OpenAI-compatible chat completions API)
    ai_gateway_url: str = "https://ai.gateway.lovable.dev/v1"
    ai_api_key: str
    ai_request_timeout: float = Field(default=120.0, gt=0)
    analysis_model: str = "google/gemini-2.5-flash"
    detailed_analysis_model: str = "google/gemini-2.5-pro"
    match_model: str = "google/gemini-2.5-flash-lite"
    extraction_model: str = "google/gemini-2.5-flash"
    default_scoring_profile: str = "standard"

    # Email delivery (Resend-compatible HTTP API)
    email_api_url: str = "https://api.resend.com"
    email_api_key: str | None = None
    email_from: str = "Recruitment <onboarding@resend.dev>"
    email_timeout: float = Field(default=30.0, gt=0)

    # Web push
    push_enabled: bool = True
    push_timeout: float = Field(default=10.0, gt=0)

    # Notification defaults (overridable at runtime via app_settings)
    notification_threshold: int = Field(default=80, ge=0, le=100)
    recruiter_notifications_enabled: bool = True

    # Rate-limit handling
    extraction_max_attempts: int = Field(default=3, ge=1)
    extraction_base_delay: float = Field(default=1.5, ge=0)
    batch_max_attempts: int = Field(default=3, ge=1)
    batch_base_delay: float = Field(default=2.0, ge=0)
    batch_inter_file_delay: float = Field(default=1.5, ge=0)
    reanalysis_batch_size: int = Field(default=5, ge=1, le=50)
    match_max_attempts: int = Field(default=3, ge=1)
    match_base_delay: float = Field(default=1.0, ge=0)
    match_inter_call_delay: float = Field(default=0.5, ge=0)

    # Analysis lease
    analysis_lease_seconds: int = Field(default=300, ge=1)

    # Uploads
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1)

    # Reminders
    reminders_enabled: bool = True
    reminder_after_days: int = Field(default=3, ge=1)
    reminder_hour: int = Field(default=9, ge=0, le=23)
    reminder_minute: int = Field(default=0, ge=0, le=59)
    scheduler_timezone: str = "UTC"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
