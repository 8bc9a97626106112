"""WebSocket recognition over a persistent connection.

The client sends a ``start`` message carrying the recognition settings, then
binary audio chunks, then a ``stop`` message. The service answers with
``{"state": "listening"}`` once it is ready, result messages as audio is
processed, and a second ``listening`` state once the audio after ``stop`` is
fully transcribed.
"""

import json
from typing import Any, AsyncIterator, Dict, List, Optional

import aiohttp
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from speech_to_text_client.authenticators import Authenticator, NoAuthAuthenticator
from speech_to_text_client.errors import RecognizeStreamError

QUERY_PARAM_NAMES = {
    "access_token": "access_token",
    "watson_token": "watson-token",
    "model": "model",
    "language_customization_id": "language_customization_id",
    "acoustic_customization_id": "acoustic_customization_id",
    "base_model_version": "base_model_version",
    "x_watson_learning_opt_out": "x-watson-learning-opt-out",
    "x_watson_metadata": "x-watson-metadata",
}

OPENING_MESSAGE_PARAM_NAMES = {
    "content_type": "content-type",
    "customization_weight": "customization_weight",
    "inactivity_timeout": "inactivity_timeout",
    "interim_results": "interim_results",
    "keywords": "keywords",
    "keywords_threshold": "keywords_threshold",
    "max_alternatives": "max_alternatives",
    "word_alternatives_threshold": "word_alternatives_threshold",
    "word_confidence": "word_confidence",
    "timestamps": "timestamps",
    "profanity_filter": "profanity_filter",
    "smart_formatting": "smart_formatting",
    "speaker_labels": "speaker_labels",
    "grammar_name": "grammar_name",
    "redaction": "redaction",
    "processing_metrics": "processing_metrics",
    "processing_metrics_interval": "processing_metrics_interval",
    "audio_metrics": "audio_metrics",
    "end_of_phrase_silence_time": "end_of_phrase_silence_time",
    "split_transcript_at_phrase_end": "split_transcript_at_phrase_end",
    "speech_detector_sensitivity": "speech_detector_sensitivity",
    "background_audio_suppression": "background_audio_suppression",
    "low_latency": "low_latency",
    "character_insertion_bias": "character_insertion_bias",
}


class RecognizeWebSocketParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Query params
    access_token: Optional[str] = None
    watson_token: Optional[str] = None
    model: Optional[str] = None
    language_customization_id: Optional[str] = None
    acoustic_customization_id: Optional[str] = None
    base_model_version: Optional[str] = None
    x_watson_learning_opt_out: Optional[bool] = None
    x_watson_metadata: Optional[str] = None

    # Opening message params
    content_type: Optional[str] = None
    customization_weight: Optional[float] = None
    inactivity_timeout: Optional[int] = None
    interim_results: Optional[bool] = None
    keywords: Optional[List[str]] = None
    keywords_threshold: Optional[float] = None
    max_alternatives: Optional[int] = None
    word_alternatives_threshold: Optional[float] = None
    word_confidence: Optional[bool] = None
    timestamps: Optional[bool] = None
    profanity_filter: Optional[bool] = None
    smart_formatting: Optional[bool] = None
    speaker_labels: Optional[bool] = None
    grammar_name: Optional[str] = None
    redaction: Optional[bool] = None
    processing_metrics: Optional[bool] = None
    processing_metrics_interval: Optional[float] = None
    audio_metrics: Optional[bool] = None
    end_of_phrase_silence_time: Optional[float] = None
    split_transcript_at_phrase_end: Optional[bool] = None
    speech_detector_sensitivity: Optional[float] = None
    background_audio_suppression: Optional[float] = None
    low_latency: Optional[bool] = None
    character_insertion_bias: Optional[float] = None

    def query_params(self) -> Dict[str, str]:
        params = {}
        for field, wire_name in QUERY_PARAM_NAMES.items():
            value = getattr(self, field)
            if value is None:
                continue
            params[wire_name] = ("true" if value else "false") if isinstance(value, bool) else str(value)
        return params

    def opening_message(self) -> Dict[str, Any]:
        return {
            wire_name: getattr(self, field)
            for field, wire_name in OPENING_MESSAGE_PARAM_NAMES.items()
            if getattr(self, field) is not None
        }


class RecognizeStreamOptions(BaseModel):
    """Everything needed to open a recognition WebSocket, fixed at construction"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    authenticator: Authenticator = Field(default_factory=NoAuthAuthenticator)
    service_url: str
    connector: Optional[aiohttp.BaseConnector] = None
    disable_ssl_verification: bool = False
    headers: Dict[str, str] = Field(default_factory=dict)
    query_params: Dict[str, str] = Field(default_factory=dict)
    opening_message: Dict[str, Any] = Field(default_factory=dict)


class RecognizeStream:
    def __init__(self, options: RecognizeStreamOptions):
        self.options = options
        self.logger = logger
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._stopped = False
        self._listening = False

    @property
    def url(self) -> str:
        base = self.options.service_url.rstrip("/")
        if base.startswith("https://"):
            base = "wss://" + base[len("https://"):]
        elif base.startswith("http://"):
            base = "ws://" + base[len("http://"):]
        return f"{base}/v1/recognize"

    @property
    def connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def __aenter__(self) -> "RecognizeStream":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def connect(self) -> None:
        """Opens the WebSocket and sends the start message"""
        if self.connected:
            return
        headers = {**await self.options.authenticator.headers(), **self.options.headers}
        connect_kwargs = {}
        if self.options.disable_ssl_verification:
            connect_kwargs["ssl"] = False

        self._session = aiohttp.ClientSession(
            connector=self.options.connector,
            connector_owner=self.options.connector is None,
        )
        self._stopped = False
        self._listening = False
        try:
            self._ws = await self._session.ws_connect(
                self.url,
                params=self.options.query_params,
                headers=headers,
                **connect_kwargs,
            )
            await self._ws.send_json({"action": "start", **self.options.opening_message})
        except (aiohttp.ClientError, ConnectionError) as e:
            await self.close()
            self.logger.error(f"Unable to open recognition stream at {self.url}: {e}")
            raise RecognizeStreamError(f"Unable to open recognition stream: {e}") from e

        self.logger.debug(f"Recognition stream opened at {self.url}")

    def _require_connection(self) -> aiohttp.ClientWebSocketResponse:
        if not self.connected:
            raise RecognizeStreamError("Recognition stream is not connected")
        return self._ws

    async def send_audio(self, chunk: bytes) -> None:
        await self._require_connection().send_bytes(chunk)

    async def stop(self) -> None:
        """Signals the end of the audio; results for audio already sent still arrive"""
        await self._require_connection().send_json({"action": "stop"})
        self._stopped = True

    async def results(self) -> AsyncIterator[Dict[str, Any]]:
        """Yields result messages until the service finishes the stopped audio"""
        ws = self._require_connection()
        async for message in ws:
            if message.type == aiohttp.WSMsgType.TEXT:
                data = json.loads(message.data)
                if "error" in data:
                    raise RecognizeStreamError(data["error"])
                if data.get("state") == "listening":
                    # The first one acknowledges start, the next one follows stop.
                    if self._listening and self._stopped:
                        return
                    self._listening = True
                    continue
                yield data
            elif message.type == aiohttp.WSMsgType.ERROR:
                raise RecognizeStreamError(f"Recognition stream failed: {ws.exception()}")
            else:
                break

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        if self._session is not None:
            await self._session.close()
            self._session = None
        self.logger.debug("Recognition stream closed")
