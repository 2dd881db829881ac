"""Configuration and settings for the email QA service"""

from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # OpenAI API
    openai_api_key: str = Field(default="")

    # Enhancement model
    enhancement_model: str = Field(default="gpt-4o-mini")
    enhancement_temperature: float = Field(default=0.1)
    enhancement_max_tokens: int = Field(default=16000)
    llm_timeout_seconds: float = Field(default=300.0)  # 5 minutes, large templates are slow

    # Cache Settings
    cache_ttl_seconds: float = Field(default=300.0)
    validation_cache_max_entries: int = Field(default=10)
    context_cache_max_entries: int = Field(default=5)

    # Debug request/response dumps of LLM calls
    agents_debug_files: bool = Field(default=False)
    debug_dir: Path = Field(default=Path("./debug"))

    # Server
    service_host: str = Field(default="0.0.0.0")
    service_port: int = Field(default=8003)

    # API Configuration
    api_title: str = "Email QA Agents Service"
    api_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


# Global settings instance
settings = Settings()
