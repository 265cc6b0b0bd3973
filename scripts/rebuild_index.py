#!/usr/bin/env python3
"""
CLI to rebuild the review namespace from scratch.

Usage:
  python scripts/rebuild_index.py --file ./data/reviews.json
Deletes every vector in the configured namespace, then loads the reviews
again. If no file is provided, the default path from configuration is used.
"""
import argparse
import json
import sys
from pathlib import Path

# Add parent directory to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from professor_rag.core.logging import get_logger
from professor_rag.services.ingestion import get_ingestion_service
from professor_rag.core.config import settings

logger = get_logger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Clear and reload the review namespace")
    parser.add_argument("--file", "-f", help="Path to reviews.json (optional)")
    args = parser.parse_args()

    path = args.file or settings.REVIEWS_DATA_PATH
    service = get_ingestion_service()

    try:
        result = service.rebuild_index(path)
        print(json.dumps(result, indent=2, default=str))
        if result.get("status") == "error":
            logger.error("Rebuild failed: %s", result.get("message"))
            return 1
        return 0

    except Exception as e:
        logger.exception("Unhandled error during rebuild: %s", e)
        print(json.dumps({"status": "error", "message": str(e)}))
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
