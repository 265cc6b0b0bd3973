"""
Chat Service Module

Business logic layer for the chat endpoint.
Handles, in order, for each request:
- Conversation validation
- Embedding + retrieval for the last message
- Prompt augmentation and system prompt injection
- Opening the completion stream and relaying it as bytes
"""

from typing import Optional, Dict, List, Iterator, Sequence
import time

from professor_rag.core.config import RAGConfig, settings
from professor_rag.core.exceptions import EmptyConversationError
from professor_rag.core.logging import get_logger
from professor_rag.llm.client import LLMClient, LLMClientFactory
from professor_rag.llm.streaming import relay_fragments
from professor_rag.models.request import ChatMessage
from professor_rag.rag.embeddings import EmbeddingClient
from professor_rag.rag.prompt import PromptBuilder, get_prompt_builder
from professor_rag.rag.retriever import Retriever
from professor_rag.rag.vector_store import PineconeIndex

logger = get_logger(__name__)


class ChatService:
    """
    Orchestrates one chat request: embed, retrieve, augment, stream.

    Every step waits on the previous one. Nothing is cached between
    requests.
    """

    def __init__(
        self,
        config: RAGConfig,
        retriever: Optional[Retriever] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        llm_client: Optional[LLMClient] = None,
    ):
        """
        Initialize chat service.

        Args:
            config: Fixed retrieval/generation configuration
            retriever: Retriever (built from config if None)
            prompt_builder: Prompt builder (default builder if None)
            llm_client: Completion client (built from config if None)
        """
        self.config = config
        self.retriever = retriever or Retriever(
            embedding_client=EmbeddingClient(
                model=config.embedding_model,
                encoding_format=config.encoding_format,
            ),
            vector_index=PineconeIndex(
                index_name=config.index_name,
                namespace=config.namespace,
            ),
            top_k=config.top_k,
            include_metadata=config.include_metadata,
        )
        self.prompt_builder = prompt_builder or get_prompt_builder()
        self.llm_client = llm_client or LLMClientFactory.create_client(
            "openai", model=config.completion_model
        )

        logger.info("Initialized ChatService")

    def validate_conversation(self, messages: Sequence[ChatMessage]) -> None:
        """
        Reject conversations with nothing to answer.

        Raises:
            EmptyConversationError: If there are no messages
        """
        if not messages:
            raise EmptyConversationError("Conversation must contain at least one message")

    def prepare_messages(self, messages: Sequence[ChatMessage]) -> List[Dict[str, str]]:
        """
        Retrieve matches for the last message and build the completion messages.

        Args:
            messages: Conversation in chronological order

        Returns:
            Messages for the completion model, system prompt first

        Raises:
            EmptyConversationError: If there are no messages
            RAGError: If embedding or retrieval fails
        """
        self.validate_conversation(messages)

        query = messages[-1].content
        matches = self.retriever.retrieve(query)

        return self.prompt_builder.build_messages(messages, matches)

    def stream_chat(self, messages: Sequence[ChatMessage]) -> Iterator[bytes]:
        """
        Run the request up to the first byte of output.

        Validation, embedding, retrieval, augmentation and the completion
        request all happen before this returns, so any failure among them
        is raised here. The returned iterator yields the completion as bytes.

        Args:
            messages: Conversation in chronological order

        Returns:
            Iterator of encoded completion fragments
        """
        start_time = time.time()

        completion_messages = self.prepare_messages(messages)
        stream = self.llm_client.start_stream(completion_messages)

        elapsed_time = time.time() - start_time
        logger.info(
            f"Completion stream opened in {elapsed_time:.2f}s "
            f"({len(messages)} conversation messages)"
        )

        return relay_fragments(stream)


# Global service instance
_chat_service = None


def get_chat_service() -> ChatService:
    """Get or create chat service instance"""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService(RAGConfig.from_settings(settings))
    return _chat_service
