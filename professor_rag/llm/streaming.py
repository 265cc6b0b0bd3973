from typing import Iterator

from professor_rag.core.exceptions import MidStreamFailure
from professor_rag.core.logging import get_logger
from professor_rag.llm.client import CompletionStream, SERVICE_NAME

logger = get_logger(__name__)


def relay_fragments(stream: CompletionStream, encoding: str = "utf-8") -> Iterator[bytes]:
    """
    Relay completion fragments to the HTTP response as they arrive.

    Each fragment is encoded and yielded on its own, in order. If the
    upstream stream fails part-way, the error is logged and re-raised as
    MidStreamFailure so the response ends abnormally instead of looking
    complete; bytes already sent stay sent.

    Args:
        stream: Open completion stream
        encoding: Text encoding for the response body

    Yields:
        Encoded fragments
    """
    sent = 0
    try:
        for fragment in stream:
            if not fragment:
                continue
            sent += 1
            yield fragment.encode(encoding)
        logger.debug(f"Completion stream finished ({sent} fragments)")
    except GeneratorExit:
        logger.info(f"Client stopped reading after {sent} fragments")
        raise
    except Exception as e:
        logger.exception(f"Completion stream failed after {sent} fragments: {e}")
        raise MidStreamFailure(
            f"Completion stream failed after {sent} fragments", service=SERVICE_NAME
        ) from e
    finally:
        # Runs on normal end, on failure and when the consumer drops the generator
        stream.close()
