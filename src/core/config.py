"""Engine configuration.

Settings are read from environment variables prefixed with CHESS_ (or a .env file), e.g.

    CHESS_MAX_SEARCH_DEPTH=2
    CHESS_RANDOM_SEED=42
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CHESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Engine opponent
    default_skill_rating: int = 800
    max_search_depth: int = 3
    random_seed: Optional[int] = None


@lru_cache
def get_settings() -> EngineSettings:
    return EngineSettings()
