"""
Centralized Configuration System
Environment-aware settings for provider adapters, routing and enrichment.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow"
    )
    """
    Production-grade configuration management.
    Loads from environment variables with sensible defaults.

    Provider credentials are optional: an adapter without a key reports
    itself as unavailable and routing degrades immediately.
    """

    # ============================================
    # PROVIDER CREDENTIALS
    # ============================================
    openai_api_key: str = ""
    gemini_api_key: str = ""

    # ============================================
    # MODEL DEFAULTS (used when a capability is invoked without a model)
    # ============================================
    openai_default_model: str = "gpt-4o-mini"
    gemini_default_model: str = "gemini-1.5-flash"

    # ============================================
    # ENRICHMENT PRIORITIES
    # ============================================
    contact_enrichment_priority: Literal["speed", "quality", "cost"] = "speed"
    company_enrichment_priority: Literal["speed", "quality", "cost"] = "quality"
    deal_enrichment_priority: Literal["speed", "quality", "cost"] = "quality"

    # ============================================
    # TRANSPORT RESILIENCE
    # ============================================
    max_retries: int = 3
    retry_min_wait_seconds: float = 2
    retry_max_wait_seconds: float = 10
    provider_timeout_seconds: float = 30.0

    circuit_breaker_enabled: bool = True
    circuit_breaker_failure_threshold: int = 5
    circuit_breaker_recovery_timeout: float = 60.0
    circuit_breaker_half_open_max_calls: int = 1

    # ============================================
    # COST CONTROLS
    # ============================================
    daily_cost_limit_usd: float = 100.0
    hourly_cost_limit_usd: float = 20.0

    # ============================================
    # LOGGING
    # ============================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    enable_structured_logging: bool = False  # Set to True for production JSON logs

    # ============================================
    # ENVIRONMENT
    # ============================================
    environment: Literal["development", "test", "staging", "production"] = "development"

    def configured_providers(self) -> dict[str, list[str]]:
        """Report which AI providers have credentials configured."""
        configured: list[str] = []
        missing: list[str] = []

        for provider, key in (("openai", self.openai_api_key), ("gemini", self.gemini_api_key)):
            if key:
                configured.append(provider)
            else:
                missing.append(provider)

        return {"configured": configured, "missing": missing}


@lru_cache()
def get_settings() -> Settings:
    """
    Singleton pattern for settings.
    Uses LRU cache to ensure only one Settings instance exists.
    """
    return Settings()


# Convenience accessor for common use
settings = get_settings()
