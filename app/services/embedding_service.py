"""Service for generating embeddings through an OpenAI-compatible HTTP API."""
from typing import Any, List, Optional

import httpx
import numpy as np

from app.config import Settings, settings as default_settings
from app.exceptions import EmbeddingError
from app.utils.logging import get_logger

logger = get_logger(__name__)


class EmbeddingService:
    """
    Thin client around the provider's embeddings endpoint.

    The HTTP client is owned by the application and injected here, so the
    connection pool is opened and closed with the app lifespan.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        url: Optional[str] = None,
        dimension: Optional[int] = None,
        timeout: Optional[float] = None,
        config: Optional[Settings] = None,
    ):
        config = config or default_settings
        self.http_client = http_client
        self.api_key = api_key if api_key is not None else config.openai_api_key
        self.model = model or config.openai_embedding_model
        self.url = url or config.openai_embeddings_url
        self.embedding_dimension = dimension or config.embedding_dimension
        self.timeout = timeout or config.embedding_timeout_seconds

    @property
    def is_configured(self) -> bool:
        """True when a provider credential is available."""
        return bool(self.api_key and str(self.api_key).strip())

    async def generate_embedding(self, text: str) -> Optional[List[float]]:
        """
        Embed a single text with one provider call.

        Returns:
            The embedding, or None when no provider credential is configured
            (the normal state during bulk data loading).

        Raises:
            ValueError: If text is empty.
            EmbeddingError: On a non-success status, a malformed response or a
                vector of the wrong length. Callers treat this as non-fatal.
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        if not self.is_configured:
            logger.debug("Embedding provider not configured, skipping embedding")
            return None

        try:
            response = await self.http_client.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key.strip()}",
                    "Content-Type": "application/json",
                },
                json={"model": self.model, "input": text},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.error(
                f"Embedding request failed: {e}",
                extra={"model": self.model, "error": str(e)}
            )
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if not response.is_success:
            logger.error(
                f"Embedding provider returned {response.status_code}",
                extra={
                    "status_code": response.status_code,
                    "model": self.model,
                    "error": response.text[:500],
                }
            )
            raise EmbeddingError(
                f"Failed to generate embedding: {response.status_code} {response.reason_phrase}"
            )

        try:
            payload = response.json()
            raw = payload["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(
                f"Malformed embedding response: {e}",
                extra={"model": self.model, "error": str(e)}
            )
            raise EmbeddingError(f"Malformed embedding response: {e}") from e

        return self.validate_embedding(raw)

    def validate_embedding(self, raw: Any) -> List[float]:
        """Check that raw is a finite 1-D vector of the configured dimension."""
        if not isinstance(raw, (list, tuple)):
            raise EmbeddingError(f"Embedding is not an array: {type(raw).__name__}")

        try:
            vector = np.asarray(raw, dtype=float)
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"Embedding contains non-numeric values: {e}") from e

        if vector.ndim != 1 or vector.shape[0] != self.embedding_dimension:
            logger.error(
                "Invalid embedding dimensions",
                extra={"expected": self.embedding_dimension, "actual": int(vector.size)}
            )
            raise EmbeddingError(
                f"Invalid embedding dimensions: expected {self.embedding_dimension}, got {vector.size}"
            )

        if not np.all(np.isfinite(vector)):
            raise EmbeddingError("Embedding contains non-finite values")

        return vector.tolist()
