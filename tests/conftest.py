"""Shared fakes for the chat pipeline tests."""

from types import SimpleNamespace

import numpy as np
import pytest

from professor_rag.core.exceptions import UpstreamUnavailable
from professor_rag.llm.client import CompletionStream
from professor_rag.models.request import ChatMessage
from professor_rag.models.response import MatchResult


def make_match(professor, review, subject, stars, score=0.9):
    return MatchResult.model_validate({
        "id": professor,
        "score": score,
        "metadata": {"review": review, "subject": subject, "stars": stars},
    })


@pytest.fixture
def three_matches():
    return [
        make_match("Dr. Emily Carter", "Explains algorithms clearly.", "Computer Science", 5),
        make_match("Prof. Michael Nguyen", "Fast lectures, heavy homework.", "Computer Science", 3),
        make_match("Dr. Sarah Thompson", "Tough but fair grader.", "Mathematics", 4.5),
    ]


class FakeEmbeddingClient:
    model = "fake-embedding"
    embedding_dim = 4

    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def embed_text(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return np.array([0.1, 0.2, 0.3, 0.4], dtype=np.float32)

    def embed_texts(self, texts, batch_size=128):
        self.calls.extend(texts)
        return [np.full(4, i, dtype=np.float32) for i, _ in enumerate(texts)]


class FakeVectorIndex:
    namespace = "ns1"

    def __init__(self, matches=None, exists=True, not_ready_polls=0):
        self.matches = matches or []
        self.exists = exists
        self.ready = exists
        self.not_ready_polls = not_ready_polls
        self.ready_polls = 0
        self.queries = []
        self.upserts = []
        self.created = []
        self.deleted = 0

    def query(self, vector, top_k=3, include_metadata=True):
        self.queries.append(SimpleNamespace(vector=vector, top_k=top_k, include_metadata=include_metadata))
        return self.matches[:top_k]

    def index_exists(self):
        return self.exists

    def create_index(self, dimension=1536, **kwargs):
        self.created.append(dimension)
        self.exists = True

    def wait_until_ready(self, timeout=300, poll_interval=2):
        # Reports initializing for the first not_ready_polls describe calls
        while True:
            self.ready_polls += 1
            if self.ready_polls > self.not_ready_polls:
                self.ready = True
                return {"status": {"ready": True, "state": "Ready"}}

    def upsert(self, vectors, batch_size=100):
        if not self.ready:
            raise UpstreamUnavailable("index is initializing", service="vector-index")
        self.upserts.extend(vectors)
        return len(vectors)

    def delete_all(self):
        self.deleted += 1

    def describe_stats(self):
        return {"index_name": "rag", "namespace": self.namespace, "total_vector_count": len(self.upserts)}


class FakeRawStream:
    """Stands in for openai's Stream: iterable of chunks with close()."""

    def __init__(self, fragments, error=None):
        self.fragments = fragments
        self.error = error
        self.closed = False

    def __iter__(self):
        for text in self.fragments:
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])
        if self.error:
            raise self.error

    def close(self):
        self.closed = True


class FakeLLMClient:
    model = "fake-model"

    def __init__(self, fragments=("Prof A ", "is great."), error=None, stream_error=None):
        self.fragments = list(fragments)
        self.error = error
        self.stream_error = stream_error
        self.sent_messages = None
        self.raw_stream = None

    def start_stream(self, messages, **kwargs):
        self.sent_messages = messages
        if self.error:
            raise self.error
        self.raw_stream = FakeRawStream(self.fragments, error=self.stream_error)
        return CompletionStream(self.raw_stream)


@pytest.fixture
def conversation():
    return [
        ChatMessage(role="user", content="Hi"),
        ChatMessage(role="assistant", content="Hello! How can I help?"),
        ChatMessage(role="user", content="Who teaches algorithms well?"),
    ]
