"""
Configuration management for the InsightStream pipeline.
Handles environment variables, AI provider settings, and pipeline tuning.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # AI Model Configuration
    OPENAI_API_KEY: Optional[str] = Field(default=None, description="OpenAI API key")
    ANALYSIS_MODEL: str = Field(default="gpt-4o-mini", description="Model used for item analysis")
    SEARCH_MODEL: str = Field(default="gpt-4o-mini", description="Model used for live web search")
    MAX_TOKENS: int = Field(default=800, description="Maximum tokens for AI responses")

    # Pipeline Configuration
    EXTERNAL_CALL_TIMEOUT: float = Field(
        default=60.0,
        description="Timeout in seconds around each search/feed/analysis call"
    )
    FEED_POLL_LATENCY: float = Field(
        default=1.2,
        description="Simulated latency in seconds for a subscription poll"
    )
    MAX_SEARCH_RESULTS: int = Field(default=5, description="Maximum items requested from live search")

    # Settings Store Configuration
    SETTINGS_PATH: str = Field(
        default="./data/insightstream_settings.json",
        description="Where keyword and subscription settings are persisted"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def get_openai_config() -> dict:
    """Get OpenAI configuration."""
    return {
        "api_key": settings.OPENAI_API_KEY,
        "analysis_model": settings.ANALYSIS_MODEL,
        "search_model": settings.SEARCH_MODEL,
        "max_tokens": settings.MAX_TOKENS,
        "timeout": settings.EXTERNAL_CALL_TIMEOUT,
    }


def get_pipeline_config() -> dict:
    """Get aggregation pipeline configuration."""
    return {
        "timeout": settings.EXTERNAL_CALL_TIMEOUT,
        "feed_latency": settings.FEED_POLL_LATENCY,
        "max_search_results": settings.MAX_SEARCH_RESULTS,
    }


def get_settings_store_path() -> str:
    """Get the path of the persisted settings document."""
    return settings.SETTINGS_PATH
