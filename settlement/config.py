"""
Configuration management using Pydantic Settings.
All parameters are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settlement matching settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SETTLEMENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application
    app_env: str = Field(default="development")
    app_log_level: str = Field(default="INFO")

    # Amount policy (percent of the expected charge)
    amount_normal_tolerance_pct: float = Field(default=0.0, ge=0)
    amount_error_threshold_pct: float = Field(default=50.0, ge=0)

    # Marker tokens
    onsite_payment_markers: List[str] = Field(
        default_factory=lambda: ["add", "$", "추가"]
    )
    cancellation_markers: List[str] = Field(default_factory=lambda: ["취소"])

    # Date windows (calendar days)
    excel_merge_window_days: int = Field(default=1, ge=0)
    receipt_date_tolerance_days: int = Field(default=1, ge=0)
    tour_date_tolerance_days: int = Field(default=1, ge=0)

    # Unmatched bookings touring on this weekday roll into the next cycle
    carry_over_weekday: int = Field(default=5, ge=0, le=6)  # Saturday

    # Classifier
    classifier_raw_label_max_length: int = Field(default=15, ge=0)

    def is_onsite_payment_note(self, text: str) -> bool:
        """Check whether a DB note carries an on-site payment marker."""
        lowered = (text or "").lower()
        return any(marker.lower() in lowered for marker in self.onsite_payment_markers if marker)

    def is_cancellation_text(self, text: str) -> bool:
        """Check whether a status/product string carries a cancellation marker."""
        return any(marker in (text or "") for marker in self.cancellation_markers if marker)

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
