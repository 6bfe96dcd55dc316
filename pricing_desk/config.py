"""
Application configuration using Pydantic Settings.
All environment-specific values and pricing-policy knobs are centralized here.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── App ──────────────────────────────────────────────
    app_name: str = "Mesa de Negociação"
    debug: bool = True
    mock_mode: bool = True  # When True, the in-memory demand store is used

    # ── MongoDB ──────────────────────────────────────────
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "pricing_desk"

    # ── Pricing policy ───────────────────────────────────
    auto_approval_spread: float = 0.65  # Alçada 1 at or above this spread
    default_target_spread: float = 0.65

    # Simples plan competitor offsets (added to credit1x / credit12x)
    simples_2to6_offset: float = 2.5
    simples_7to12_offset: float = 0.0
    simples_13to18_offset: float = 4.0

    # Seed mix (percent of TPV); installments share the remainder
    default_mix_debit: float = 40.0
    default_mix_credit1x: float = 30.0

    # ── Logging ──────────────────────────────────────────
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()
