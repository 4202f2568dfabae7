from __future__ import annotations

from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

ARAS_TRACKING_URL = "https://kargotakip.araskargo.com.tr/mainpage.aspx"

BrowserType = Literal["chromium", "firefox", "webkit"]


class TrackerSettings(BaseSettings):
    """Browser and page timing settings, read from ``KARGO_TAKIP_*`` variables."""

    headless: bool = True
    browser_type: BrowserType = "chromium"
    navigation_timeout_ms: int = Field(default=30000, gt=0)
    settle_delay_ms: int = Field(default=1000, ge=0)
    # Tab links are either there or not; no point waiting for navigation.
    tab_timeout_ms: int = Field(default=5000, gt=0)
    base_url: str = ARAS_TRACKING_URL

    model_config = SettingsConfigDict(
        env_prefix="KARGO_TAKIP_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    @classmethod
    def from_env(cls, **overrides) -> "TrackerSettings":
        """Settings from the environment, ``overrides`` taking precedence."""
        try:
            return cls(**overrides)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid tracker settings: {exc}") from exc
