"""
Retriever Module

Finds the professor reviews most similar to a user message.

Retrieval Process:
1. Convert the message to an embedding
2. Query the Pinecone index for the top-k neighbours (with metadata)
3. Return the matches exactly as ranked by the index

No similarity threshold is applied: weak matches are passed on as-is.
"""

from typing import List

from professor_rag.core.config import settings
from professor_rag.core.logging import get_logger
from professor_rag.models.response import MatchResult
from professor_rag.rag.embeddings import get_embedding_client
from professor_rag.rag.vector_store import get_vector_index

logger = get_logger(__name__)


class Retriever:
    """
    Retrieves the most relevant professor reviews for a query.
    """

    def __init__(
        self,
        embedding_client=None,
        vector_index=None,
        top_k: int = settings.RETRIEVAL_TOP_K,
        include_metadata: bool = settings.INCLUDE_METADATA,
    ):
        """
        Initialize retriever.

        Args:
            embedding_client: Embedding client (uses default if None)
            vector_index: Pinecone index client (uses default if None)
            top_k: Number of matches to retrieve
            include_metadata: Whether matches carry their review metadata
        """
        self.embedding_client = embedding_client or get_embedding_client()
        self.vector_index = vector_index or get_vector_index()
        self.top_k = top_k
        self.include_metadata = include_metadata

        logger.info(f"Initialized Retriever: top_k={top_k}")

    def retrieve(self, query: str) -> List[MatchResult]:
        """
        Retrieve the top-k matches for a query.

        The query is embedded exactly as received.

        Args:
            query: Latest user message content

        Returns:
            Up to top_k matches, ranked by the index
        """
        logger.debug(f"Retrieving matches for query: {query[:100]}...")

        query_embedding = self.embedding_client.embed_text(query)

        matches = self.vector_index.query(
            vector=query_embedding,
            top_k=self.top_k,
            include_metadata=self.include_metadata,
        )

        logger.info(f"Retrieved {len(matches)} matches")
        return matches
