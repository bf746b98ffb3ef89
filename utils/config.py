"""
Change-feed configuration - environment-based settings.
"""
from datetime import date
from functools import lru_cache
from typing import Annotated, Optional, Tuple

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from core.faults import ConfigurationFault
from utils.common import parse_iso_date

# Load environment variables from .env file
load_dotenv()

CommaList = Annotated[list[str], NoDecode]


class Settings(BaseSettings):
    """Settings loaded from environment variables (and .env)."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # SEC API - a contact string is required by SEC EDGAR
    sec_user_agent: Optional[str] = None
    sec_rate_limit: float = 10.0  # requests per second
    request_timeout: float = 30.0
    request_concurrency: int = 4

    # Watch list
    tickers: CommaList = []
    ciks: CommaList = []
    forms: CommaList = ["10-K", "10-Q", "8-K"]

    # Date window (inclusive, YYYY-MM-DD)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    backfill: bool = False
    backfill_days: int = 30

    # Limits
    max_companies: int = 200
    max_filings_per_company: int = 200
    max_state_keys: int = 20000
    ticker_cache_ttl_hours: float = 24.0

    # Enrichment
    parse_sections: bool = True
    max_section_chars: int = 12000
    ai_summarize: bool = True
    openrouter_api_key: Optional[str] = None
    openrouter_model: str = "gpt-4o-mini"

    # Output
    output_dir: str = "output"
    output_formats: CommaList = ["json"]

    @field_validator("tickers", "ciks", "forms", "output_formats", mode="before")
    @classmethod
    def _split_comma_list(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(v).strip() for v in value if str(v).strip()]

    def date_window(self) -> Tuple[Optional[date], Optional[date]]:
        """
        Parsed (start, end) window.

        Raises:
            ConfigurationFault: If a bound is set but not a YYYY-MM-DD date
        """
        bounds = []
        for name in ("start_date", "end_date"):
            raw = (getattr(self, name) or "").strip()
            parsed = parse_iso_date(raw)
            if raw and parsed is None:
                raise ConfigurationFault(f"{name.upper()} must be YYYY-MM-DD, got {raw!r}")
            bounds.append(parsed)
        return bounds[0], bounds[1]

    def validate_for_run(self) -> None:
        """Fail fast before any network activity."""
        if not (self.sec_user_agent or "").strip():
            raise ConfigurationFault(
                "SEC_USER_AGENT environment variable is required. "
                "Set it in your .env file: SEC_USER_AGENT='Your Name your@email.com'"
            )
        if self.request_concurrency < 1:
            raise ConfigurationFault("REQUEST_CONCURRENCY must be at least 1")
        self.date_window()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
