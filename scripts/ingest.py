#!/usr/bin/env python3
"""
CLI for loading professor reviews into the Pinecone index.

Usage examples:
  python scripts/ingest.py
  python scripts/ingest.py --file ./data/reviews.json --batch-size 50

Creates the index if it does not exist. Prints a JSON result and exits with
non-zero on error.
"""
import argparse
import json
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from professor_rag.core.config import settings
from professor_rag.core.logging import get_logger
from professor_rag.services.ingestion import get_ingestion_service

logger = get_logger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Load professor reviews into the vector index")
    parser.add_argument("--file", "-f", default=settings.REVIEWS_DATA_PATH, help="Path to reviews.json")
    parser.add_argument("--batch-size", type=int, default=settings.UPSERT_BATCH_SIZE, help="Reviews per embedding/upsert request")

    args = parser.parse_args()

    service = get_ingestion_service()

    try:
        result = service.ingest_reviews(args.file, batch_size=args.batch_size)

        print(json.dumps(result, indent=2, default=str))

        if result.get("status") == "error":
            logger.error("Ingestion failed: %s", result.get("message"))
            return 1
        return 0

    except Exception as e:
        logger.exception("Unhandled error during ingestion: %s", e)
        print(json.dumps({"status": "error", "message": str(e)}))
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
