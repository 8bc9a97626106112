from typing import AsyncGenerator, Tuple

import pytest
import pytest_asyncio
from speech_server import SpeechServer
from speech_to_text_client.polling import StatusPoller

BASE_URL_TEMPLATE = "http://127.0.0.1:{}"


class ScriptedFetcher:
    """Status fetcher that replays a fixed script; the last entry repeats."""

    def __init__(self, script):
        self.script = list(script)
        self.calls = 0

    async def __call__(self):
        item = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def scripted():
    return ScriptedFetcher


@pytest.fixture
def waits(monkeypatch):
    """Records the attempt number of every wait between attempts."""
    recorded = []
    original = StatusPoller._wait_before_retry

    async def recording_wait(self, attempt):
        recorded.append(attempt)
        await original(self, attempt)

    monkeypatch.setattr(StatusPoller, "_wait_before_retry", recording_wait)
    return recorded


@pytest_asyncio.fixture
async def server() -> AsyncGenerator[Tuple[SpeechServer, str], None]:
    """Start and yield a SpeechServer with its base URL on a free port."""
    server_instance = SpeechServer()
    port = await server_instance.start()
    try:
        yield server_instance, BASE_URL_TEMPLATE.format(port)
    finally:
        await server_instance.stop()


@pytest_asyncio.fixture
async def closed_port_url() -> str:
    """Base URL of a port nothing is listening on."""
    server_instance = SpeechServer()
    port = await server_instance.start()
    await server_instance.stop()
    return BASE_URL_TEMPLATE.format(port)
