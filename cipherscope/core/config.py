from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CIPHERSCOPE_",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Cipherscope"
    app_env: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"

    # Input limits
    max_input_size: int = 10_485_760
    security_hard_limit: int = 1_073_741_824

    # Multi-layer decoding
    max_depth: int = 15
    min_confidence: float = 70.0
    entropy_epsilon: float = 0.5
    language_stop_score: float = 80.0
    min_layer_bytes: int = 10

    # Time budgets
    layer_timeout_seconds: float = 5.0
    validator_timeout_seconds: float = 1.0

    # Chunked first pass
    chunk_size: int = 1_048_576
    max_chunks: int = 5
    enable_chunking: bool = True

    # Pattern fan-out
    enable_parallel: bool = True
    max_workers: int | None = None

    # Results
    cache_size: int = 128
    max_alternatives: int = 7
    cross_check_max_alternatives: int = 9

    # Cipher and hash analysis
    cipher_min_score: float = 40.0
    cipher_min_letters: int = 10
    hash_min_confidence: float = 45.0
    hash_max_results: int = 8

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
