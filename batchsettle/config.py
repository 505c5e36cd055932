"""Runtime configuration: env-driven.

Centralized config using pydantic-settings. Reads from a .env file and
BATCHSETTLE_* environment variables.
"""

from __future__ import annotations

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Smallest batch the demo scenarios generate.
MIN_DEMO_BATCH_SIZE = 5


class SettleConfig(BaseSettings):
    """Settlement configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BATCHSETTLE_ENVIRONMENT=staging
        export BATCHSETTLE_LOG_LEVEL=DEBUG
        export BATCHSETTLE_ALLOW_REPEAT_COMPLETION=true

    Or via .env file::

        BATCHSETTLE_ENVIRONMENT=production
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BATCHSETTLE_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Display name of the ledger's base currency
    native_symbol: str = "ETH"

    # Escrow lifecycle: whether a completed escrow may be completed again
    # after being re-funded.  Off means one-shot escrows.
    allow_repeat_completion: bool = False

    # Number of recipients the demo scenarios generate
    demo_batch_size: int = MIN_DEMO_BATCH_SIZE

    @field_validator("demo_batch_size")
    @classmethod
    def _clamp_batch_size(cls, value: int) -> int:
        return max(value, MIN_DEMO_BATCH_SIZE)

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"
