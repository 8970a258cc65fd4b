from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DICE_CALC_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    server_name: str = "mcp-dice-calculator"
    log_level: str = "INFO"

    # Upper bound on the dice a single expression may roll; checked before rolling.
    max_dice: int = 1000

    # Set for reproducible rolls (tests, demos). Unset uses secrets.SystemRandom.
    rng_seed: int | None = None


@lru_cache
def get_settings() -> Settings:
    return Settings()
