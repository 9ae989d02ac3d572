"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    handoff_env: str = "development"
    handoff_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Model routing
    model_cheap: str = "claude-haiku-4-5-20251001"
    model_frontier: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 32000
    thinking_budget_tokens: int = 16000

    # Chunking
    device_pixel_ratio: float = 1.0
    max_chunks_per_asset: int | None = None  # None = no cap

    # Optional JSON file the checkpoint history is mirrored to
    checkpoint_file: str | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
