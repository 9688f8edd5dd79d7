"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # Database (async driver URL)
    DATABASE_URL: str = "sqlite+aiosqlite:///./maintenance.db"
    DATABASE_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"

    # Currency used when a caller omits one on a Money value
    DEFAULT_CURRENCY: str = "USD"

    # SLA windows in minutes, keyed by priority
    SLA_EMERGENCY_RESPONSE_MINUTES: int = 30
    SLA_EMERGENCY_RESOLUTION_MINUTES: int = 240
    SLA_EMERGENCY_ESCALATION_MINUTES: int = 60
    SLA_HIGH_RESPONSE_MINUTES: int = 120
    SLA_HIGH_RESOLUTION_MINUTES: int = 1440
    SLA_HIGH_ESCALATION_MINUTES: int = 240
    SLA_MEDIUM_RESPONSE_MINUTES: int = 480
    SLA_MEDIUM_RESOLUTION_MINUTES: int = 4320
    SLA_MEDIUM_ESCALATION_MINUTES: int = 1440
    SLA_LOW_RESPONSE_MINUTES: int = 1440
    SLA_LOW_RESOLUTION_MINUTES: int = 10080  # 7 days
    SLA_LOW_ESCALATION_MINUTES: int = 2880

    # Breach sweep
    SLA_SWEEP_BATCH_SIZE: int = 200

    @property
    def sla_minutes(self) -> dict[str, tuple[int, int, int]]:
        """(response, resolution, escalation) minutes keyed by priority value."""
        return {
            "emergency": (
                self.SLA_EMERGENCY_RESPONSE_MINUTES,
                self.SLA_EMERGENCY_RESOLUTION_MINUTES,
                self.SLA_EMERGENCY_ESCALATION_MINUTES,
            ),
            "high": (
                self.SLA_HIGH_RESPONSE_MINUTES,
                self.SLA_HIGH_RESOLUTION_MINUTES,
                self.SLA_HIGH_ESCALATION_MINUTES,
            ),
            "medium": (
                self.SLA_MEDIUM_RESPONSE_MINUTES,
                self.SLA_MEDIUM_RESOLUTION_MINUTES,
                self.SLA_MEDIUM_ESCALATION_MINUTES,
            ),
            "low": (
                self.SLA_LOW_RESPONSE_MINUTES,
                self.SLA_LOW_RESOLUTION_MINUTES,
                self.SLA_LOW_ESCALATION_MINUTES,
            ),
        }


settings = Settings()
