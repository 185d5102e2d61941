"""Google Speech-to-Text REST client (``v1/speech:recognize``)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from titulyzer.errors import ConfigurationError, ForceChunking
from titulyzer.pipeline_config import TranscriptionConfig

logger = logging.getLogger(__name__)

RECOGNIZE_URL = "https://speech.googleapis.com/v1/speech:recognize"

NO_SPEECH_TEXT = "No speech could be transcribed from this audio."


class SpeechClient:
    """Wraps a single synchronous-recognition call to the speech API."""

    def __init__(
        self,
        api_key: str,
        config: TranscriptionConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key.strip():
            raise ConfigurationError("GOOGLE_SPEECH_API_KEY is not configured")
        self._api_key = api_key
        self.config = config
        self._http_client = http_client

    def build_request(self, content_b64: str) -> dict[str, Any]:
        """Return the JSON body for a recognize request."""
        return {
            "audio": {"content": content_b64},
            "config": {
                "encoding": "LINEAR16",
                "sampleRateHertz": self.config.sample_rate_hz,
                "languageCode": self.config.language_code,
                "enableAutomaticPunctuation": True,
            },
        }

    async def recognize(self, content_b64: str, timeout: float) -> str:
        """Transcribe base64-encoded LINEAR16 audio.

        Returns the first alternative of every result joined by spaces, or
        :data:`NO_SPEECH_TEXT` when the API returns no results.

        Raises:
            ForceChunking: the API rejected the payload as too long/large.
            httpx.HTTPError: any other transport or provider failure, unmodified.
        """
        body = self.build_request(content_b64)
        if self._http_client is not None:
            response = await self._post(self._http_client, body, timeout)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._post(client, body, timeout)

        if response.is_error:
            self._raise_for_error(response)

        return _join_results(response.json())

    async def _post(
        self, client: httpx.AsyncClient, body: dict[str, Any], timeout: float
    ) -> httpx.Response:
        return await client.post(
            RECOGNIZE_URL,
            params={"key": self._api_key},
            json=body,
            timeout=timeout,
        )

    def _raise_for_error(self, response: httpx.Response) -> None:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        message = ""
        if isinstance(payload, dict):
            error = payload.get("error") or {}
            if isinstance(error, dict):
                message = str(error.get("message") or "")

        logger.error(
            "Speech API error: status=%s message=%s", response.status_code, message or response.text
        )

        if response.status_code == 400 and any(
            phrase in message for phrase in self.config.force_chunking_phrases
        ):
            raise ForceChunking(message)

        response.raise_for_status()


def _join_results(payload: Any) -> str:
    results = payload.get("results") if isinstance(payload, dict) else None
    if not results:
        return NO_SPEECH_TEXT

    texts: list[str] = []
    for result in results:
        alternatives = result.get("alternatives") or []
        if alternatives:
            texts.append(str(alternatives[0].get("transcript", "")))

    text = " ".join(t for t in texts if t)
    return text if text.strip() else NO_SPEECH_TEXT
