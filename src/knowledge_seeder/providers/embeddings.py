"""Embedding providers.

``embedding_provider`` selects between OpenAI embeddings (the default,
matching the dimensionality of existing indexes) and a local
sentence-transformer model served through ``langchain-huggingface``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from knowledge_seeder.config import settings

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class TextEmbedder(Protocol):
    """``embed(text) -> vector`` capability consumed by the seed pipeline."""

    def embed(self, text: str) -> list[float]:
        ...


def get_embedding_function(provider: str | None = None) -> Embeddings:
    """Return the configured LangChain embedding model.

    Raises
    ------
    ValueError
        For an unknown *provider*.
    """
    provider = (provider or settings.embedding_provider).lower()
    if provider == "openai":
        from langchain_openai import OpenAIEmbeddings

        return OpenAIEmbeddings(
            model=settings.embedding_model,
            dimensions=settings.embedding_dimensions,
            api_key=settings.openai_api_key,
            timeout=settings.embedding_timeout_seconds,
        )
    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(
            model_name=settings.embedding_model,
            encode_kwargs={"normalize_embeddings": True},
        )
    raise ValueError(f"Unsupported embedding provider: {provider!r}")


class LangChainEmbedder:
    """Adapt a LangChain ``Embeddings`` object to :class:`TextEmbedder`."""

    def __init__(self, embeddings: Embeddings | None = None) -> None:
        self._embeddings = embeddings if embeddings is not None else get_embedding_function()

    def embed(self, text: str) -> list[float]:
        return [float(value) for value in self._embeddings.embed_query(text)]
