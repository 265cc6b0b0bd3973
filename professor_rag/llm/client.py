from typing import Iterator, Optional, Dict, Any, List
from abc import ABC, abstractmethod

import openai
from openai import OpenAI

from professor_rag.core.config import settings
from professor_rag.core.logging import get_logger
from professor_rag.utils.upstream import translate_openai_error

logger = get_logger(__name__)

SERVICE_NAME = "completion"


class CompletionStream:
    """
    Open streaming completion.

    Iterating yields the non-empty content fragments in the order the model
    produced them. close() releases the underlying HTTP response.
    """

    def __init__(self, raw_stream):
        self._raw = raw_stream

    @staticmethod
    def extract_content(chunk: Any) -> str:
        """Pull the delta text out of one streamed chunk ('' if there is none)"""
        choices = getattr(chunk, "choices", None)
        if not choices:
            return ""
        delta = getattr(choices[0], "delta", None)
        if delta is None:
            return ""
        return getattr(delta, "content", None) or ""

    def __iter__(self) -> Iterator[str]:
        for chunk in self._raw:
            content = self.extract_content(chunk)
            if content:
                yield content

    def close(self):
        close = getattr(self._raw, "close", None)
        if close is not None:
            close()


class LLMClient(ABC):
    """Abstract base class for LLM clients"""

    model: str

    @abstractmethod
    def start_stream(self, messages: List[Dict[str, str]], **kwargs) -> CompletionStream:
        """Open a streaming completion for a list of role-tagged messages"""
        pass


class OpenAIChatClient(LLMClient):
    """OpenAI chat-completions client"""

    def __init__(
        self,
        api_key: Optional[str] = settings.OPENAI_API_KEY,
        model: str = settings.LLM_MODEL_NAME,
        timeout: float = settings.UPSTREAM_TIMEOUT_SECONDS,
        client=None,
    ):
        """
        Initialize OpenAI chat client

        Args:
            api_key: OpenAI API key (read from the environment if None)
            model: Chat model name
            timeout: Request timeout in seconds
            client: Pre-built OpenAI client (tests inject fakes here)
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client

        logger.info(f"Initialized OpenAI chat client with model: {self.model}")

    @property
    def client(self):
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

    def start_stream(self, messages: List[Dict[str, str]], **kwargs) -> CompletionStream:
        """
        Open a streaming chat completion.

        The request is sent before this returns, so connection and auth
        failures surface here rather than while the caller is iterating.

        Args:
            messages: Role-tagged messages, system prompt first
            **kwargs: Extra chat.completions parameters

        Returns:
            CompletionStream over the response fragments

        Raises:
            UpstreamAuthError, UpstreamUnavailable: If the request fails
        """
        try:
            logger.debug(f"Streaming completion with model: {self.model} ({len(messages)} messages)")
            raw_stream = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                stream=True,
                **kwargs,
            )
        except openai.OpenAIError as e:
            logger.error(f"Error starting completion stream: {e}")
            raise translate_openai_error(e, SERVICE_NAME) from e

        return CompletionStream(raw_stream)


class LLMClientFactory:
    """Factory for creating LLM clients"""

    _clients = {
        "openai": OpenAIChatClient,
    }

    @classmethod
    def create_client(cls, client_type: str = "openai", **kwargs) -> LLMClient:
        """
        Create LLM client instance

        Raises:
            ValueError: If client type is not supported
        """
        if client_type not in cls._clients:
            raise ValueError(
                f"Unsupported LLM client type: {client_type}. "
                f"Supported types: {list(cls._clients.keys())}"
            )

        client_class = cls._clients[client_type]
        logger.info(f"Creating {client_type} LLM client")
        return client_class(**kwargs)
