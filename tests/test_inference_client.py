"""Tests for OpenAIInferenceClient with a stubbed AsyncOpenAI: it fakes the API so we can check the request we send and how chunks and failures come back, without hitting the real service."""

import unittest
from types import SimpleNamespace

from openai import OpenAIError

from studybuddy.assembly import assemble_prompt
from studybuddy.errors import InferenceError
from studybuddy.inference import GenerationOptions, OpenAIInferenceClient
from studybuddy.state import Turn


def _chunk(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class StubStream:
    def __init__(self, chunks, error=None) -> None:
        self.chunks = chunks
        self.error = error
        self.closed = False

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    async def close(self) -> None:
        self.closed = True


class StubChatCompletions:
    def __init__(self, client: "StubClient") -> None:
        self._client = client

    async def create(self, **kwargs):
        self._client.calls.append(kwargs)
        if self._client.create_error is not None:
            raise self._client.create_error
        if kwargs.get("stream"):
            return self._client.stream
        message = SimpleNamespace(content="Whole reply")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class StubClient:
    def __init__(self, stream=None, create_error=None) -> None:
        self.calls = []
        self.stream = stream
        self.create_error = create_error
        self.chat = SimpleNamespace(completions=StubChatCompletions(self))


class OpenAIInferenceClientTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        history = [Turn(role="user", content="q1"), Turn(role="assistant", content="a1")]
        self.payload = assemble_prompt("PERSONA", history, "q2")
        self.options = GenerationOptions(model="fake-model", max_output_tokens=123, temperature=0.3)

    async def test_streams_text_deltas_in_order(self) -> None:
        stream = StubStream(
            [
                _chunk("Photo"),
                _chunk(None),
                SimpleNamespace(choices=[]),
                _chunk("synthesis is"),
                _chunk(" the process..."),
            ]
        )
        stub_client = StubClient(stream=stream)
        client = OpenAIInferenceClient(stub_client, self.options)

        fragments = [fragment async for fragment in client.generate(self.payload)]

        self.assertEqual(fragments, ["Photo", "synthesis is", " the process..."])
        self.assertTrue(stream.closed)
        recorded = stub_client.calls[0]
        self.assertEqual(recorded["model"], "fake-model")
        self.assertEqual(recorded["max_tokens"], 123)
        self.assertEqual(recorded["temperature"], 0.3)
        self.assertTrue(recorded["stream"])
        self.assertEqual(recorded["messages"][0], {"role": "system", "content": "PERSONA"})
        self.assertEqual(recorded["messages"][-1], {"role": "user", "content": "q2"})
        self.assertEqual(len(recorded["messages"]), 4)

    async def test_request_failure_becomes_inference_error(self) -> None:
        cause = OpenAIError("rate limited")
        client = OpenAIInferenceClient(StubClient(create_error=cause), self.options)

        with self.assertRaises(InferenceError) as ctx:
            async for _ in client.generate(self.payload):
                pass
        self.assertIs(ctx.exception.cause, cause)

    async def test_mid_stream_failure_keeps_delivered_fragments(self) -> None:
        stream = StubStream([_chunk("partial")], error=OpenAIError("connection reset"))
        client = OpenAIInferenceClient(StubClient(stream=stream), self.options)

        received = []
        with self.assertRaises(InferenceError):
            async for fragment in client.generate(self.payload):
                received.append(fragment)
        self.assertEqual(received, ["partial"])
        self.assertTrue(stream.closed)

    async def test_early_close_closes_the_provider_stream(self) -> None:
        stream = StubStream([_chunk("one"), _chunk("two")])
        client = OpenAIInferenceClient(StubClient(stream=stream), self.options)

        fragments = client.generate(self.payload)
        self.assertEqual(await fragments.__anext__(), "one")
        await fragments.aclose()
        self.assertTrue(stream.closed)

    async def test_non_streaming_mode_yields_one_fragment(self) -> None:
        stub_client = StubClient()
        client = OpenAIInferenceClient(stub_client, self.options)

        fragments = [fragment async for fragment in client.generate(self.payload, streaming=False)]

        self.assertEqual(fragments, ["Whole reply"])
        self.assertNotIn("stream", stub_client.calls[0])


if __name__ == "__main__":
    unittest.main()
