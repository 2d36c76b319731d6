from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.
    Automatically loads values from a .env file if present.
    """

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # allow extra env vars without crashing
    )

    # App
    ENV: str = Field("development", description="Environment: development, production")
    DEBUG: bool = Field(True, description="Debug mode enabled/disabled")
    HOST: str = Field("0.0.0.0", description="Bind address for the HTTP server")
    PORT: int = Field(3000, description="Port for the HTTP server")

    # Upstream stock exchange API
    STOCK_API_BASE: str = Field(
        "http://20.244.56.144/evaluation-service",
        description="Base URL of the stock price feed",
    )
    STOCK_API_TOKEN: Optional[str] = Field(None, description="Bearer token for the stock price feed")
    UPSTREAM_TIMEOUT: float = Field(10.0, description="Seconds before an upstream request is abandoned")

    # Price history cache (seconds)
    CACHE_TTL: int = Field(300, description="Lifetime of a cached price history")
    CACHE_CHECK_PERIOD: int = Field(60, description="Seconds between expired-entry sweeps")


# Global instance
settings = Settings()
