import aiohttp
import pytest
from pydantic import ValidationError
from speech_to_text_client.errors import RecognizeStreamError
from speech_to_text_client.recognize_stream import RecognizeStream, RecognizeStreamOptions
from speech_to_text_client.speech_to_text_client import SpeechToTextV1


def test_params_are_split_into_query_and_opening_message():
    client = SpeechToTextV1(service_url="https://stt.example.com")

    stream = client.recognize_using_websocket(
        model="en-US_BroadbandModel",
        language_customization_id="lm-1",
        x_watson_learning_opt_out=True,
        content_type="audio/wav",
        interim_results=True,
        keywords=["hello", "world"],
        keywords_threshold=0.5,
    )

    assert stream.options.query_params == {
        "model": "en-US_BroadbandModel",
        "language_customization_id": "lm-1",
        "x-watson-learning-opt-out": "true",
    }
    assert stream.options.opening_message == {
        "content-type": "audio/wav",
        "interim_results": True,
        "keywords": ["hello", "world"],
        "keywords_threshold": 0.5,
    }
    assert stream.url == "wss://stt.example.com/v1/recognize"
    assert not stream.connected


def test_caller_headers_override_sdk_headers():
    client = SpeechToTextV1(service_url="http://localhost:9000")

    stream = client.recognize_using_websocket(
        headers={"User-Agent": "my-app/1.0", "X-Trace": "abc"}
    )

    headers = stream.options.headers
    assert headers["User-Agent"] == "my-app/1.0"
    assert headers["X-Trace"] == "abc"
    assert "operation_id=recognizeUsingWebSocket" in headers["X-IBMCloud-SDK-Analytics"]
    assert stream.url == "ws://localhost:9000/v1/recognize"


@pytest.mark.asyncio
async def test_connection_settings_come_from_client():
    connector = aiohttp.TCPConnector()
    try:
        client = SpeechToTextV1(
            service_url="https://stt.example.com",
            connector=connector,
            disable_ssl_verification=True,
        )

        options = client.recognize_using_websocket().options

        assert options.connector is connector
        assert options.disable_ssl_verification is True
        assert options.authenticator is client.authenticator
    finally:
        await connector.close()


def test_unknown_params_are_rejected():
    client = SpeechToTextV1(service_url="https://stt.example.com")

    with pytest.raises(ValidationError):
        client.recognize_using_websocket(sample_rate=16000)


def test_options_are_immutable():
    options = RecognizeStreamOptions(service_url="https://stt.example.com")

    with pytest.raises(ValidationError):
        options.service_url = "https://other.example.com"


@pytest.mark.asyncio
async def test_send_audio_requires_connection():
    stream = RecognizeStream(RecognizeStreamOptions(service_url="http://localhost:1"))

    with pytest.raises(RecognizeStreamError):
        await stream.send_audio(b"\x00")


@pytest.mark.asyncio
async def test_streaming_recognition(server):
    server_instance, base_url = server
    client = SpeechToTextV1(service_url=base_url)

    async with client.recognize_using_websocket(
        content_type="audio/l16; rate=16000", model="en-US_NarrowbandModel"
    ) as stream:
        await stream.send_audio(b"\x00" * 320)
        await stream.send_audio(b"\x00" * 320)
        await stream.stop()
        results = [message async for message in stream.results()]

    assert not stream.connected
    assert len(results) == 1
    assert results[0]["results"][0]["alternatives"][0]["transcript"] == "hello world"
    assert results[0]["audio_bytes"] == 640

    request = server_instance.requests[0]
    assert request["query"] == {"model": "en-US_NarrowbandModel"}
    assert request["opening_message"] == {
        "action": "start",
        "content-type": "audio/l16; rate=16000",
    }


@pytest.mark.asyncio
async def test_streaming_error_message(server):
    server_instance, base_url = server
    server_instance.stream_error = "unable to transcode data stream"
    client = SpeechToTextV1(service_url=base_url)

    async with client.recognize_using_websocket(content_type="audio/wav") as stream:
        with pytest.raises(RecognizeStreamError, match="unable to transcode"):
            async for _ in stream.results():
                pass


@pytest.mark.asyncio
async def test_connect_failure(closed_port_url):
    client = SpeechToTextV1(service_url=closed_port_url)
    stream = client.recognize_using_websocket()

    with pytest.raises(RecognizeStreamError):
        await stream.connect()

    assert not stream.connected


@pytest.mark.asyncio
async def test_failed_start_message_releases_connection(server, monkeypatch):
    _, base_url = server

    async def failing_send_json(self, data, *args, **kwargs):
        raise ConnectionResetError("Cannot write to closing transport")

    monkeypatch.setattr(aiohttp.ClientWebSocketResponse, "send_json", failing_send_json)
    stream = SpeechToTextV1(service_url=base_url).recognize_using_websocket()

    with pytest.raises(RecognizeStreamError, match="closing transport"):
        async with stream:
            pass

    assert not stream.connected
    assert stream._ws is None
    assert stream._session is None
