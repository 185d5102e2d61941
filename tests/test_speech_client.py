"""Tests for the Speech-to-Text REST client, using httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from titulyzer.errors import ConfigurationError, ForceChunking
from titulyzer.pipeline_config import TranscriptionConfig
from titulyzer.transcription.speech_client import NO_SPEECH_TEXT, RECOGNIZE_URL, SpeechClient


def make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    config: TranscriptionConfig | None = None,
) -> SpeechClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SpeechClient("test-key", config or TranscriptionConfig(), http_client=http_client)


def respond(status: int, payload: Any) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json=payload)

    return handler


# ---------------------------------------------------------------------------
# Construction and request shape
# ---------------------------------------------------------------------------


class TestSpeechClientSetup:
    def test_blank_key_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            SpeechClient("  ", TranscriptionConfig())

    def test_build_request(self) -> None:
        client = SpeechClient("k", TranscriptionConfig(language_code="en-US", sample_rate_hz=8000))
        body = client.build_request("QUJD")
        assert body == {
            "audio": {"content": "QUJD"},
            "config": {
                "encoding": "LINEAR16",
                "sampleRateHertz": 8000,
                "languageCode": "en-US",
                "enableAutomaticPunctuation": True,
            },
        }

    @pytest.mark.asyncio
    async def test_posts_key_and_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"results": []})

        await make_client(handler).recognize("QUJD", timeout=5)

        request = seen[0]
        assert request.method == "POST"
        assert f"{request.url.scheme}://{request.url.host}{request.url.path}" == RECOGNIZE_URL
        assert request.url.params["key"] == "test-key"
        body = json.loads(request.content)
        assert body["audio"]["content"] == "QUJD"
        assert body["config"]["languageCode"] == "pt-BR"
        assert body["config"]["sampleRateHertz"] == 16000


# ---------------------------------------------------------------------------
# Response handling
# ---------------------------------------------------------------------------


class TestRecognize:
    @pytest.mark.asyncio
    async def test_joins_first_alternatives_with_spaces(self) -> None:
        payload = {
            "results": [
                {"alternatives": [{"transcript": "olá pessoal"}, {"transcript": "ola"}]},
                {"alternatives": [{"transcript": "bem-vindos"}]},
            ]
        }
        text = await make_client(respond(200, payload)).recognize("QUJD", timeout=5)
        assert text == "olá pessoal bem-vindos"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [{}, {"results": []}, {"results": [{"alternatives": []}]}, {"results": [{"alternatives": [{"transcript": "  "}]}]}],
    )
    async def test_no_speech_yields_sentinel(self, payload: dict[str, Any]) -> None:
        text = await make_client(respond(200, payload)).recognize("QUJD", timeout=5)
        assert text == NO_SPEECH_TEXT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "message",
        ["Sync input too long. For audio longer than 1 min use LongRunningRecognize", "Request payload size exceeds the limit"],
    )
    async def test_too_long_forces_chunking(self, message: str) -> None:
        client = make_client(respond(400, {"error": {"code": 400, "message": message}}))
        with pytest.raises(ForceChunking):
            await client.recognize("QUJD", timeout=5)

    @pytest.mark.asyncio
    async def test_trigger_phrases_are_configurable(self) -> None:
        config = TranscriptionConfig(force_chunking_phrases=("exceeds",))
        client = make_client(
            respond(400, {"error": {"message": "Request payload size exceeds the limit"}}), config
        )
        with pytest.raises(ForceChunking):
            await client.recognize("QUJD", timeout=5)

        client = make_client(respond(400, {"error": {"message": "Sync input too long"}}), config)
        with pytest.raises(httpx.HTTPStatusError):
            await client.recognize("QUJD", timeout=5)

    @pytest.mark.asyncio
    async def test_other_bad_request_propagates(self) -> None:
        client = make_client(respond(400, {"error": {"message": "Invalid recognition 'config'"}}))
        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await client.recognize("QUJD", timeout=5)
        assert exc_info.value.response.status_code == 400

    @pytest.mark.asyncio
    async def test_server_error_propagates(self) -> None:
        client = make_client(respond(500, {"error": {"message": "too long"}}))
        with pytest.raises(httpx.HTTPStatusError):
            await client.recognize("QUJD", timeout=5)

    @pytest.mark.asyncio
    async def test_non_json_error_propagates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(httpx.HTTPStatusError):
            await make_client(handler).recognize("QUJD", timeout=5)

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(httpx.ConnectError):
            await make_client(handler).recognize("QUJD", timeout=5)
