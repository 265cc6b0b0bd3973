from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from professor_rag.core.exceptions import MidStreamFailure, UpstreamUnavailable
from professor_rag.llm.client import CompletionStream, OpenAIChatClient
from professor_rag.llm.streaming import relay_fragments

from conftest import FakeRawStream


def chunk(content=None, choices=True):
    if not choices:
        return SimpleNamespace(choices=[])
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


def test_completion_stream_skips_empty_chunks():
    raw = [chunk("Hello"), chunk(None), chunk(choices=False), chunk(""), chunk(" world")]

    assert list(CompletionStream(raw)) == ["Hello", " world"]


def test_start_stream_requests_streaming_completion():
    fake = MagicMock()
    fake.chat.completions.create.return_value = [chunk("x")]
    client = OpenAIChatClient(api_key="sk-test", model="gpt-4", client=fake)
    messages = [{"role": "system", "content": "s"}, {"role": "user", "content": "q"}]

    stream = client.start_stream(messages)

    fake.chat.completions.create.assert_called_once_with(
        model="gpt-4", messages=messages, stream=True
    )
    assert list(stream) == ["x"]


def test_start_stream_maps_setup_errors():
    fake = MagicMock()
    fake.chat.completions.create.side_effect = openai.APITimeoutError(
        request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    )
    client = OpenAIChatClient(api_key="sk-test", client=fake)

    with pytest.raises(UpstreamUnavailable):
        client.start_stream([{"role": "user", "content": "q"}])


def test_relay_encodes_each_fragment_in_order():
    raw = FakeRawStream(["Prof A ", "is great.", "☆"])

    out = list(relay_fragments(CompletionStream(raw)))

    assert out == [b"Prof A ", b"is great.", "☆".encode("utf-8")]
    assert raw.closed


def test_relay_raises_mid_stream_failure_after_partial_output():
    raw = FakeRawStream(["first"], error=httpx.ReadError("reset"))
    relay = relay_fragments(CompletionStream(raw))

    assert next(relay) == b"first"
    with pytest.raises(MidStreamFailure):
        next(relay)
    assert raw.closed


def test_relay_closes_upstream_when_consumer_stops():
    raw = FakeRawStream(["a", "b", "c"])
    relay = relay_fragments(CompletionStream(raw))

    assert next(relay) == b"a"
    relay.close()

    assert raw.closed
