from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import numpy as np
import openai
import pytest

from professor_rag.core.exceptions import (
    MalformedUpstreamResponse,
    UpstreamAuthError,
    UpstreamUnavailable,
)
from professor_rag.rag.embeddings import EmbeddingClient


def openai_with_response(data):
    fake = MagicMock()
    fake.embeddings.create.return_value = SimpleNamespace(data=data)
    return fake


def test_embed_text_requests_float_vector_for_exact_text():
    fake = openai_with_response([SimpleNamespace(index=0, embedding=[0.1, 0.2, 0.3])])
    client = EmbeddingClient(api_key="sk-test", client=fake)

    vector = client.embed_text("  Who teaches algorithms well?")

    fake.embeddings.create.assert_called_once_with(
        model="text-embedding-3-small",
        input="  Who teaches algorithms well?",
        encoding_format="float",
    )
    assert vector.dtype == np.float32
    assert vector.shape == (3,)


def test_embed_text_without_vectors_is_malformed():
    client = EmbeddingClient(api_key="sk-test", client=openai_with_response([]))

    with pytest.raises(MalformedUpstreamResponse):
        client.embed_text("hello")


def test_embed_text_maps_authentication_error():
    request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
    response = httpx.Response(401, request=request)
    fake = MagicMock()
    fake.embeddings.create.side_effect = openai.AuthenticationError(
        "Incorrect API key", response=response, body=None
    )
    client = EmbeddingClient(api_key="sk-bad", client=fake)

    with pytest.raises(UpstreamAuthError):
        client.embed_text("hello")


def test_embed_text_maps_connection_error():
    fake = MagicMock()
    fake.embeddings.create.side_effect = openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/embeddings")
    )
    client = EmbeddingClient(api_key="sk-test", client=fake)

    with pytest.raises(UpstreamUnavailable):
        client.embed_text("hello")


def test_missing_api_key_fails_on_first_call(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    client = EmbeddingClient(api_key=None)

    with pytest.raises(UpstreamAuthError):
        client.embed_text("hello")


def test_embed_texts_batches_in_order():
    fake = MagicMock()
    fake.embeddings.create.side_effect = [
        SimpleNamespace(data=[
            SimpleNamespace(index=1, embedding=[2.0]),
            SimpleNamespace(index=0, embedding=[1.0]),
        ]),
        SimpleNamespace(data=[SimpleNamespace(index=0, embedding=[3.0])]),
    ]
    client = EmbeddingClient(api_key="sk-test", client=fake)

    vectors = client.embed_texts(["a", "b", "c"], batch_size=2)

    assert [v.tolist() for v in vectors] == [[1.0], [2.0], [3.0]]
    assert fake.embeddings.create.call_count == 2


def test_embed_text_with_non_numeric_vector_is_malformed():
    fake = openai_with_response([SimpleNamespace(index=0, embedding="AAAAAA==")])
    client = EmbeddingClient(api_key="sk-test", client=fake)

    with pytest.raises(MalformedUpstreamResponse):
        client.embed_text("hello")
