from collections.abc import Sequence
from typing import Protocol

import openai
from loguru import logger
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.exceptions import UpstreamFailure


class EmbeddingProvider(Protocol):
    async def embed(self, titles: Sequence[str]) -> list[list[float]]: ...

    async def close(self) -> None: ...


class OpenAIEmbeddingProvider:
    """
    Embeds titles with the OpenAI embeddings API, one vector per title.

    Failures are surfaced as UpstreamFailure and never retried here.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = settings.EMBEDDING_MODEL,
        timeout: float = settings.EMBEDDING_TIMEOUT_SECONDS,
    ):
        self.model = model
        self.client: AsyncOpenAI | None = None
        if api_key := api_key or settings.OPENAI_API_KEY:
            # max_retries=0: retry policy belongs to the caller
            self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            logger.warning("OPENAI_API_KEY not set. Title submissions will fail until it is configured.")

    async def embed(self, titles: Sequence[str]) -> list[list[float]]:
        if not self.client:
            raise UpstreamFailure("Embedding provider is not configured.")

        try:
            response = await self.client.embeddings.create(input=list(titles), model=self.model)
        except openai.OpenAIError as e:
            logger.error(f"Error getting embeddings for {len(titles)} titles: {e}")
            raise UpstreamFailure("Embedding provider request failed.") from e

        # The API may reorder items; ``index`` maps each vector back to its title
        vectors = [item.embedding for item in sorted(response.data, key=lambda item: item.index)]
        if len(vectors) != len(titles):
            raise UpstreamFailure(f"Embedding provider returned {len(vectors)} vectors for {len(titles)} titles.")
        return vectors

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None
