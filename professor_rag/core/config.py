import os
from dataclasses import dataclass
from typing import List, Optional
from pydantic_settings import BaseSettings

from professor_rag.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings and configuration"""

    # ============ APP SETTINGS ============
    APP_NAME: str = "Professor RAG"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"

    # ============ SERVER SETTINGS ============
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 8000))
    RELOAD: bool = os.getenv("RELOAD", "False").lower() == "true"

    # ============ CORS SETTINGS ============
    # Comma-separated list of origins
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # ============ API KEYS ============
    # Required at call time; a missing key fails the first upstream call
    OPENAI_API_KEY: Optional[str] = None
    PINECONE_API_KEY: Optional[str] = None

    # ============ EMBEDDING SETTINGS ============
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_ENCODING_FORMAT: str = "float"
    EMBEDDING_DIMENSION: int = 1536

    # ============ LLM SETTINGS ============
    LLM_MODEL_NAME: str = "gpt-4"

    # ============ VECTOR INDEX SETTINGS (Pinecone) ============
    PINECONE_INDEX_NAME: str = "rag"
    PINECONE_NAMESPACE: str = "ns1"
    PINECONE_INDEX_HOST: Optional[str] = None
    PINECONE_CONTROL_PLANE_URL: str = "https://api.pinecone.io"
    PINECONE_API_VERSION: str = "2024-07"
    PINECONE_METRIC: str = "cosine"
    PINECONE_CLOUD: str = "aws"
    PINECONE_REGION: str = "us-east-1"
    # Polling for a newly created index to finish initializing
    PINECONE_READY_TIMEOUT_SECONDS: float = 300
    PINECONE_READY_POLL_SECONDS: float = 2

    # ============ RAG SETTINGS ============
    RETRIEVAL_TOP_K: int = 3
    INCLUDE_METADATA: bool = True
    REVIEWS_DATA_PATH: str = os.getenv("REVIEWS_DATA_PATH", "./data/reviews.json")
    UPSERT_BATCH_SIZE: int = 100

    # ============ NETWORK SETTINGS ============
    UPSTREAM_TIMEOUT_SECONDS: float = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", 120))

    # ============ LOGGING SETTINGS ============
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE", "logs/app.log")

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@dataclass(frozen=True)
class RAGConfig:
    """
    Fixed retrieval/generation configuration handed to the chat service.

    Built once at startup from Settings; there is no per-request override.
    """

    index_name: str
    namespace: str
    embedding_model: str
    encoding_format: str
    completion_model: str
    top_k: int = 3
    include_metadata: bool = True

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RAGConfig":
        config = cls(
            index_name=settings.PINECONE_INDEX_NAME,
            namespace=settings.PINECONE_NAMESPACE,
            embedding_model=settings.EMBEDDING_MODEL,
            encoding_format=settings.EMBEDDING_ENCODING_FORMAT,
            completion_model=settings.LLM_MODEL_NAME,
            top_k=settings.RETRIEVAL_TOP_K,
            include_metadata=settings.INCLUDE_METADATA,
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Raise ConfigurationError if any fixed value is unusable."""
        for name in ("index_name", "namespace", "embedding_model", "completion_model"):
            if not getattr(self, name):
                raise ConfigurationError(f"{name} must not be empty")
        # embed_text decodes float vectors only
        if self.encoding_format != "float":
            raise ConfigurationError(
                f"Unsupported embedding encoding format: {self.encoding_format}"
            )
        if self.top_k < 1:
            raise ConfigurationError(f"top_k must be >= 1, got {self.top_k}")


# Instantiate settings
settings = Settings()
