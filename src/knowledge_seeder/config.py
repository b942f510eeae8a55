"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for local vLLM)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="LLM model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for the LLM API. Leave empty to use OpenAI cloud. "
            "Set to any OpenAI-compatible endpoint for local serving."
        ),
    )
    llm_temperature: float = Field(default=0.7, gt=0.0, le=2.0)
    llm_timeout_seconds: float = 120.0

    # Embedding
    embedding_provider: str = Field(default="openai", description="'openai' or 'huggingface'")
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = Field(default=1536, ge=1)
    embedding_timeout_seconds: float = 30.0

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "principles"
    vector_index_name: str = "vector_index"
    text_key: str = "embedding_text"
    embedding_key: str = "embedding"
    distance_metric: str = "cosine"

    # Generation
    target_domain: str = "frontend design principles"
    default_record_count: int = Field(default=10, ge=1)

    # Chat
    chat_api_url: str = "http://localhost:3000"
    chat_timeout_seconds: float = 60.0

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
