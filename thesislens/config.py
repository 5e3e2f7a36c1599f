from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_GUIDE = "Vachellia caven is a nurse plant, not just an invasive weed."


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # ==== LLM endpoint (OpenAI-compatible) ====
    llm_api_key: str = ""
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_model: str = "gemini-2.5-flash"
    llm_timeout: float = Field(600.0, gt=0, description="Seconds before the SDK gives up on a request")
    llm_temperature: float = Field(0.7, ge=0, le=2)

    # ==== Pipeline ====
    inter_document_delay_seconds: float = Field(0.8, ge=0, description="Fixed pause between deep analyses")
    analysis_max_chars: int = Field(20000, gt=0)
    taxonomy_preview_size: int = Field(20, gt=0)

    # ==== Reports / chat ====
    synthesis_max_articles: int = Field(40, gt=0)
    comparative_max_articles: int = Field(50, gt=0)
    chat_history_turns: int = Field(3, ge=0)

    # ==== Workspace defaults ====
    default_user_guide: str = DEFAULT_USER_GUIDE
    default_taxonomy_mode: Literal["broad", "standard", "specific"] = "standard"

    # ==== Service ====
    app_version: str = "0.1.0"
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
