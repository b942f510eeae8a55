"""
Providers: the language-model and embedding capabilities.

The rest of the package only sees two narrow interfaces,
``complete(prompt) -> str`` and ``embed(text) -> list[float]``; this
module is the one place that knows about LangChain provider classes.
"""

from knowledge_seeder.providers.embeddings import LangChainEmbedder, TextEmbedder, get_embedding_function
from knowledge_seeder.providers.llm import ChatModelCompleter, get_llm

__all__ = [
    "ChatModelCompleter",
    "LangChainEmbedder",
    "TextEmbedder",
    "get_embedding_function",
    "get_llm",
]
