"""
Vector Store Module

Thin client for a hosted Pinecone index, spoken to over its REST API.

Vector Database:
- Stores one 1536-dim vector per professor review, with the review text,
  subject and star rating as metadata
- Answers top-k nearest-neighbour queries inside a namespace
- Is populated offline by the review loader (see services/ingestion.py)

Process:
1. Resolve the index data-plane host from its name (control plane)
2. Query by vector to get the top-k matches with metadata
3. Upsert / delete vectors when (re)loading reviews
"""

from typing import List, Dict, Any, Optional, Sequence
import time

import numpy as np
import requests
from pydantic import ValidationError

from professor_rag.core.config import settings
from professor_rag.core.exceptions import (
    MalformedUpstreamResponse,
    UpstreamAuthError,
    UpstreamUnavailable,
)
from professor_rag.core.logging import get_logger
from professor_rag.models.response import MatchResult
from professor_rag.utils.upstream import json_body, translate_requests_error

logger = get_logger(__name__)

SERVICE_NAME = "vector-index"


class PineconeIndex:
    """
    Pinecone index wrapper for similarity search and vector management.
    """

    def __init__(
        self,
        api_key: Optional[str] = settings.PINECONE_API_KEY,
        index_name: str = settings.PINECONE_INDEX_NAME,
        namespace: str = settings.PINECONE_NAMESPACE,
        host: Optional[str] = settings.PINECONE_INDEX_HOST,
        control_plane_url: str = settings.PINECONE_CONTROL_PLANE_URL,
        api_version: str = settings.PINECONE_API_VERSION,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECONDS,
    ):
        """
        Initialize index client.

        Args:
            api_key: Pinecone API key
            index_name: Name of the index
            namespace: Namespace queried and written to
            host: Data-plane host; looked up from index_name if None
            control_plane_url: Base URL of the Pinecone control plane
            api_version: Value of the X-Pinecone-API-Version header
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.index_name = index_name
        self.namespace = namespace
        self.control_plane_url = control_plane_url.rstrip("/")
        self.api_version = api_version
        self.timeout = timeout
        self._host = self._normalize_host(host) if host else None

        logger.info(f"Using Pinecone index: {index_name} (namespace={namespace})")

    @staticmethod
    def _normalize_host(host: str) -> str:
        host = host.rstrip("/")
        if not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return host

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            raise UpstreamAuthError("PINECONE_API_KEY is not set", service=SERVICE_NAME)
        return {
            "Api-Key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "X-Pinecone-API-Version": self.api_version,
        }

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Send one request and return its decoded JSON body."""
        headers = self._headers()
        try:
            response = requests.request(
                method,
                url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Pinecone {method} {url} failed: {e}")
            raise translate_requests_error(e, SERVICE_NAME) from e

        if not response.content:
            return {}
        return json_body(response, SERVICE_NAME)

    # ============ CONTROL PLANE ============

    def describe_index(self) -> Dict[str, Any]:
        """Fetch the index description (dimension, metric, host, status)"""
        return self._request("GET", f"{self.control_plane_url}/indexes/{self.index_name}")

    def index_exists(self) -> bool:
        """Check whether the index exists on the control plane"""
        try:
            self.describe_index()
            return True
        except UpstreamUnavailable as e:
            if e.status_code == 404:
                return False
            raise

    def create_index(
        self,
        dimension: int = settings.EMBEDDING_DIMENSION,
        metric: str = settings.PINECONE_METRIC,
        cloud: str = settings.PINECONE_CLOUD,
        region: str = settings.PINECONE_REGION,
    ) -> Dict[str, Any]:
        """
        Create a serverless index with this client's name.

        Args:
            dimension: Vector dimension (must match the embedding model)
            metric: Similarity metric
            cloud: Serverless cloud provider
            region: Serverless region

        Returns:
            Index description returned by Pinecone
        """
        payload = {
            "name": self.index_name,
            "dimension": dimension,
            "metric": metric,
            "spec": {"serverless": {"cloud": cloud, "region": region}},
        }
        result = self._request("POST", f"{self.control_plane_url}/indexes", payload)
        logger.info(f"Created index {self.index_name} ({dimension} dims, {metric})")
        return result

    def wait_until_ready(
        self,
        timeout: float = settings.PINECONE_READY_TIMEOUT_SECONDS,
        poll_interval: float = settings.PINECONE_READY_POLL_SECONDS,
    ) -> Dict[str, Any]:
        """
        Poll the index description until Pinecone reports status.ready.

        A freshly created serverless index rejects writes while it is
        initializing, so the loader waits here before its first upsert.

        Args:
            timeout: Seconds to wait before giving up
            poll_interval: Seconds between describe calls

        Returns:
            The first index description that reports ready

        Raises:
            UpstreamUnavailable: If the index is not ready within timeout
        """
        deadline = time.monotonic() + timeout
        while True:
            description = self.describe_index()
            status = description.get("status") if isinstance(description, dict) else None
            if isinstance(status, dict) and status.get("ready"):
                logger.info(f"Index {self.index_name} is ready")
                return description

            state = status.get("state") if isinstance(status, dict) else None
            if time.monotonic() >= deadline:
                raise UpstreamUnavailable(
                    f"Index '{self.index_name}' not ready after {timeout:.0f}s (state={state})",
                    service=SERVICE_NAME,
                )
            logger.debug(f"Waiting for index {self.index_name} (state={state})")
            time.sleep(poll_interval)

    def resolve_host(self) -> str:
        """Return the data-plane host, looking it up once per client"""
        if self._host is None:
            description = self.describe_index()
            host = description.get("host") if isinstance(description, dict) else None
            if not host:
                raise MalformedUpstreamResponse(
                    f"Index description for '{self.index_name}' has no host",
                    service=SERVICE_NAME,
                )
            self._host = self._normalize_host(host)
            logger.debug(f"Resolved index host: {self._host}")
        return self._host

    # ============ DATA PLANE ============

    def query(
        self,
        vector: np.ndarray,
        top_k: int = settings.RETRIEVAL_TOP_K,
        include_metadata: bool = settings.INCLUDE_METADATA,
    ) -> List[MatchResult]:
        """
        Query the index for the nearest neighbours of a vector.

        Args:
            vector: Query embedding
            top_k: Number of matches to return
            include_metadata: Ask Pinecone to return stored metadata

        Returns:
            Matches in the order Pinecone ranked them (may be fewer than top_k)

        Raises:
            MalformedUpstreamResponse: If the body has no matches list or a
                match lacks its id or review metadata
        """
        payload = {
            "namespace": self.namespace,
            "vector": np.asarray(vector, dtype=np.float32).tolist(),
            "topK": top_k,
            "includeMetadata": include_metadata,
            "includeValues": False,
        }
        body = self._request("POST", f"{self.resolve_host()}/query", payload)

        raw_matches = body.get("matches") if isinstance(body, dict) else None
        if not isinstance(raw_matches, list):
            raise MalformedUpstreamResponse(
                "Query response has no 'matches' list", service=SERVICE_NAME
            )

        try:
            matches = [MatchResult.model_validate(m) for m in raw_matches]
        except ValidationError as e:
            raise MalformedUpstreamResponse(
                f"Query response has an invalid match: {e}", service=SERVICE_NAME
            ) from e

        logger.debug(f"Found {len(matches)} matches")
        return matches

    def upsert(
        self,
        vectors: Sequence[Dict[str, Any]],
        batch_size: int = settings.UPSERT_BATCH_SIZE,
    ) -> int:
        """
        Upsert vectors into the namespace.

        Args:
            vectors: Items shaped {"id", "values", "metadata"}
            batch_size: Vectors per request

        Returns:
            Number of vectors Pinecone reported as upserted
        """
        if not vectors:
            logger.warning("No vectors provided for upsert")
            return 0

        upserted = 0
        url = f"{self.resolve_host()}/vectors/upsert"
        for i in range(0, len(vectors), batch_size):
            batch = [
                {**v, "values": np.asarray(v["values"], dtype=np.float32).tolist()}
                for v in vectors[i:i + batch_size]
            ]
            body = self._request("POST", url, {"vectors": batch, "namespace": self.namespace})
            upserted += int(body.get("upsertedCount", len(batch)))
            logger.info(f"Upserted batch {i // batch_size + 1}: {len(batch)} vectors")

        return upserted

    def delete_all(self) -> None:
        """Delete every vector in the namespace"""
        self._request(
            "POST",
            f"{self.resolve_host()}/vectors/delete",
            {"deleteAll": True, "namespace": self.namespace},
        )
        logger.info(f"Cleared namespace {self.namespace}")

    def describe_stats(self) -> Dict[str, Any]:
        """Get vector counts for the index and this namespace"""
        body = self._request("POST", f"{self.resolve_host()}/describe_index_stats", {})
        namespaces = body.get("namespaces") or {}
        return {
            "index_name": self.index_name,
            "namespace": self.namespace,
            "dimension": body.get("dimension"),
            "total_vector_count": body.get("totalVectorCount", 0),
            "namespace_vector_count": namespaces.get(self.namespace, {}).get("vectorCount", 0),
        }


# Global index instance
_vector_index = None


def get_vector_index() -> PineconeIndex:
    """Get or create index client"""
    global _vector_index
    if _vector_index is None:
        _vector_index = PineconeIndex()
    return _vector_index
