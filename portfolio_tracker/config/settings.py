"""Application configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class AppSettings(BaseSettings):
    """Configuration options for the portfolio tracker service."""

    app_name: str = Field(default="Portfolio Tracker")
    log_level: str = Field(default="INFO")

    database_url: str = Field(
        default="sqlite+aiosqlite:///./portfolio_tracker.db",
        description="SQLAlchemy async database URL.",
    )

    naver_item_url: str = Field(default="https://finance.naver.com/item/main.nhn")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)
    price_request_timeout_seconds: float = Field(default=10.0)
    naver_cache_ttl_seconds: float = Field(
        default=60.0,
        description="How long a scraped domestic price is reused before refetching.",
    )
    price_fallback_concurrency: int = Field(
        default=4,
        ge=1,
        description="Maximum per-symbol fallback lookups in flight at once.",
    )

    default_portfolio_name: str = Field(default="My Portfolio")
    default_portfolio_description: str | None = Field(default="Stock investment portfolio")
    unassigned_group_label: str = Field(default="Other")

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="portfolio-tracker")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"database_url"}
        return {k: ("***" if k in hidden else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """Return cached application settings with optional overrides."""

    if overrides:
        return AppSettings(**overrides)
    return AppSettings()
