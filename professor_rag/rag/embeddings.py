"""
Embeddings Module

Turns text into vectors with the OpenAI embeddings API.

Process:
1. Take input text (the latest user message, or a review when loading the index)
2. Send it to the embedding model (text-embedding-3-small)
3. Get back a float vector (1536-dimensional)
4. Use it to query, or populate, the Pinecone index
"""

import numpy as np
from typing import List, Optional

import openai
from openai import OpenAI

from professor_rag.core.config import settings
from professor_rag.core.exceptions import MalformedUpstreamResponse
from professor_rag.core.logging import get_logger
from professor_rag.utils.upstream import translate_openai_error

logger = get_logger(__name__)

SERVICE_NAME = "embeddings"


class EmbeddingClient:
    """
    Embedding client for generating vector representations using OpenAI.
    """

    def __init__(
        self,
        api_key: Optional[str] = settings.OPENAI_API_KEY,
        model: str = settings.EMBEDDING_MODEL,
        encoding_format: str = settings.EMBEDDING_ENCODING_FORMAT,
        embedding_dim: int = settings.EMBEDDING_DIMENSION,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECONDS,
        client=None,
    ):
        """
        Initialize embedding client.

        Args:
            api_key: OpenAI API key (read from the environment if None)
            model: Embedding model name
            encoding_format: Wire encoding requested from the API
            embedding_dim: Expected dimension of output embeddings
            timeout: Request timeout in seconds
            client: Pre-built OpenAI client (tests inject fakes here)
        """
        self.api_key = api_key
        self.model = model
        self.encoding_format = encoding_format
        self.embedding_dim = embedding_dim
        self.timeout = timeout
        self._client = client

        logger.info(f"Initialized Embedding Client with model: {self.model}")

    @property
    def client(self):
        # Built on first use so a missing key fails the request, not startup
        if self._client is None:
            try:
                self._client = OpenAI(
                    api_key=self.api_key,
                    timeout=self.timeout,
                    max_retries=0,
                )
            except openai.OpenAIError as e:
                raise translate_openai_error(e, SERVICE_NAME) from e
        return self._client

    def _create(self, payload):
        try:
            return self.client.embeddings.create(
                model=self.model,
                input=payload,
                encoding_format=self.encoding_format,
            )
        except openai.OpenAIError as e:
            logger.error(f"Error generating embedding: {e}")
            raise translate_openai_error(e, SERVICE_NAME) from e

    def embed_text(self, text: str) -> np.ndarray:
        """
        Generate embedding for a single text.

        The text is sent exactly as given; no trimming or normalization.

        Args:
            text: Input text to embed

        Returns:
            Numpy array of embeddings (shape: embedding_dim,)

        Raises:
            UpstreamAuthError, UpstreamUnavailable: If the API call fails
            MalformedUpstreamResponse: If the response does not hold exactly one vector
        """
        response = self._create(text)

        data = getattr(response, "data", None)
        if not data or len(data) != 1:
            raise MalformedUpstreamResponse(
                f"Expected exactly one embedding, got {len(data) if data else 0}",
                service=SERVICE_NAME,
            )
        vector = getattr(data[0], "embedding", None)
        if not vector:
            raise MalformedUpstreamResponse(
                "Embedding response item has no vector", service=SERVICE_NAME
            )

        try:
            embedding = np.asarray(vector, dtype=np.float32)
        except (TypeError, ValueError) as e:
            raise MalformedUpstreamResponse(
                f"Embedding vector is not numeric: {e}", service=SERVICE_NAME
            ) from e
        logger.debug(f"Generated embedding for text (length: {len(text)})")
        return embedding

    def embed_texts(self, texts: List[str], batch_size: int = 128) -> List[np.ndarray]:
        """
        Generate embeddings in batches (used when loading the index).

        Args:
            texts: List of input texts
            batch_size: Number of texts per request

        Returns:
            List of numpy arrays, in input order
        """
        all_embeddings = []

        for i in range(0, len(texts), batch_size):
            batch = texts[i:i + batch_size]
            logger.debug(f"Processing batch {i // batch_size + 1} ({len(batch)} texts)")

            response = self._create(batch)
            data = getattr(response, "data", None) or []
            if len(data) != len(batch):
                raise MalformedUpstreamResponse(
                    f"Expected {len(batch)} embeddings, got {len(data)}",
                    service=SERVICE_NAME,
                )
            # resp.data is ordered by input index
            for item in sorted(data, key=lambda d: getattr(d, "index", 0)):
                all_embeddings.append(np.asarray(item.embedding, dtype=np.float32))

        logger.info(f"Generated embeddings for {len(all_embeddings)} texts")
        return all_embeddings


# Global embedding client instance
_embedding_client = None


def get_embedding_client() -> EmbeddingClient:
    """Get or create embedding client"""
    global _embedding_client
    if _embedding_client is None:
        _embedding_client = EmbeddingClient()
    return _embedding_client
