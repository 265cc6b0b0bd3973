"""
Review Ingestion Service Module

Loads professor reviews into the Pinecone index the chat endpoint queries.
Handles:
- Reading and validating reviews.json
- Creating the serverless index when it does not exist
- Embedding review texts and upserting them with their metadata
- Clearing and reloading the namespace
"""

from typing import Dict, Any, List, Optional, Union
import json
import time
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from professor_rag.core.config import settings
from professor_rag.core.logging import get_logger
from professor_rag.rag.embeddings import get_embedding_client
from professor_rag.rag.vector_store import get_vector_index

logger = get_logger(__name__)


class Review(BaseModel):
    """One entry of reviews.json"""
    professor: str = Field(..., min_length=1)
    review: str = Field(..., min_length=1)
    subject: str
    stars: float = Field(..., ge=0, le=5)

    def to_vector(self, values) -> Dict[str, Any]:
        """Pinecone vector record: the professor name is the vector id"""
        return {
            "id": self.professor,
            "values": values,
            "metadata": {
                "review": self.review,
                "subject": self.subject,
                "stars": self.stars,
            },
        }


class IngestionService:
    """
    Service for loading reviews and managing the vector index.
    """

    def __init__(self, embedding_client=None, vector_index=None):
        """Initialize ingestion service with RAG components"""
        self.embedding_client = embedding_client or get_embedding_client()
        self.vector_index = vector_index or get_vector_index()

        logger.info("Initialized IngestionService")

    def load_reviews(self, file_path: Union[str, Path]) -> List[Review]:
        """
        Read reviews from a JSON file shaped {"reviews": [...]}.

        Args:
            file_path: Path to reviews.json

        Returns:
            Parsed reviews

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not valid review JSON
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"Reviews file not found: {path}")

        with path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {path}: {e}") from e

        raw_reviews = data.get("reviews") if isinstance(data, dict) else None
        if not isinstance(raw_reviews, list):
            raise ValueError(f"{path} must contain a 'reviews' list")

        try:
            reviews = [Review.model_validate(r) for r in raw_reviews]
        except ValidationError as e:
            raise ValueError(f"Invalid review in {path}: {e}") from e

        logger.info(f"Loaded {len(reviews)} reviews from {path}")
        return reviews

    def ensure_index(self) -> bool:
        """
        Create the index if it does not exist yet and wait until it
        accepts writes.

        Returns:
            True if the index was created
        """
        if self.vector_index.index_exists():
            return False
        self.vector_index.create_index(dimension=self.embedding_client.embedding_dim)
        self.vector_index.wait_until_ready()
        return True

    def ingest_reviews(
        self,
        file_path: Optional[Union[str, Path]] = None,
        batch_size: int = settings.UPSERT_BATCH_SIZE,
    ) -> Dict[str, Any]:
        """
        Embed every review and upsert it into the index.

        Args:
            file_path: Path to reviews.json (uses default if None)
            batch_size: Texts per embedding request and vectors per upsert

        Returns:
            Ingestion result with statistics
        """
        try:
            start_time = time.time()
            path = file_path or settings.REVIEWS_DATA_PATH

            reviews = self.load_reviews(path)
            if not reviews:
                logger.warning(f"No reviews found in {path}")
                return {"status": "warning", "message": "No reviews to ingest", "upserted_count": 0}

            created = self.ensure_index()

            embeddings = self.embedding_client.embed_texts(
                [r.review for r in reviews], batch_size=batch_size
            )
            vectors = [r.to_vector(e) for r, e in zip(reviews, embeddings)]
            upserted = self.vector_index.upsert(vectors, batch_size=batch_size)

            elapsed_time = time.time() - start_time
            logger.info(f"Ingested {upserted} reviews in {elapsed_time:.2f}s")

            return {
                "status": "success",
                "message": f"Ingested {upserted} reviews",
                "source": str(path),
                "index_created": created,
                "reviews_loaded": len(reviews),
                "upserted_count": upserted,
                "processing_time_s": elapsed_time,
            }

        except Exception as e:
            logger.error(f"Error ingesting reviews: {e}")
            return {
                "status": "error",
                "message": str(e)
            }

    def rebuild_index(self, file_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Clear the namespace and load the reviews again.

        Args:
            file_path: Path to reviews.json (uses default if None)

        Returns:
            Rebuild operation result
        """
        try:
            if self.vector_index.index_exists():
                logger.warning(f"Clearing namespace {self.vector_index.namespace}")
                self.vector_index.delete_all()
        except Exception as e:
            logger.error(f"Error clearing index: {e}")
            return {
                "status": "error",
                "message": str(e)
            }

        result = self.ingest_reviews(file_path)
        if result.get("status") == "success":
            result["message"] = "Index rebuild complete"
        return result

    def get_index_stats(self) -> Dict[str, Any]:
        """
        Get vector index statistics.

        Returns:
            Index statistics
        """
        try:
            return {
                "status": "success",
                **self.vector_index.describe_stats()
            }
        except Exception as e:
            logger.error(f"Error getting index stats: {e}")
            return {
                "status": "error",
                "message": str(e)
            }


# Global service instance
_ingestion_service = None


def get_ingestion_service() -> IngestionService:
    """Get or create ingestion service instance"""
    global _ingestion_service
    if _ingestion_service is None:
        _ingestion_service = IngestionService()
    return _ingestion_service
