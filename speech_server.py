from typing import List, Optional

from aiohttp import WSMsgType, web
from loguru import logger


class SpeechServer:
    """Local stand-in for the speech-to-text service.

    Corpus and language-model statuses are served from scripted sequences; the
    last entry repeats once a sequence is exhausted.
    """

    def __init__(
        self,
        corpora_statuses: Optional[List[List[str]]] = None,
        model_statuses: Optional[List[str]] = None,
        transcript: str = "hello world",
    ):
        self.corpora_statuses = corpora_statuses or [["analyzed"]]
        self.model_statuses = model_statuses or ["available"]
        self.transcript = transcript
        self.stream_error = None
        self.requests = []
        self.corpora_calls = 0
        self.model_calls = 0
        self.runner = None
        self.app = web.Application()
        self.app.router.add_get(
            "/v1/customizations/{customization_id}/corpora", self.handle_corpora
        )
        self.app.router.add_get(
            "/v1/customizations/{customization_id}", self.handle_language_model
        )
        self.app.router.add_get("/v1/recognize", self.handle_recognize_websocket)
        self.app.router.add_post("/v1/recognize", self.handle_recognize)
        self.logger = logger

    def _record(self, request: web.Request) -> None:
        self.requests.append(
            {
                "method": request.method,
                "path": request.path,
                "query": dict(request.query),
                "headers": request.headers.copy(),
            }
        )

    @staticmethod
    def _next(sequence: list, calls: int):
        return sequence[min(calls, len(sequence) - 1)]

    async def handle_corpora(self, request):
        self._record(request)
        statuses = self._next(self.corpora_statuses, self.corpora_calls)
        self.corpora_calls += 1
        self.logger.info(f"Returning corpora statuses {statuses}")
        return web.json_response(
            {
                "corpora": [
                    {"name": f"corpus-{index}", "status": status, "total_words": 10}
                    for index, status in enumerate(statuses)
                ]
            }
        )

    async def handle_language_model(self, request):
        self._record(request)
        status = self._next(self.model_statuses, self.model_calls)
        self.model_calls += 1
        self.logger.info(f"Returning customization status {status}")
        return web.json_response(
            {
                "customization_id": request.match_info["customization_id"],
                "name": "test model",
                "status": status,
            }
        )

    def _results(self, audio_size: int) -> dict:
        return {
            "result_index": 0,
            "results": [
                {
                    "final": True,
                    "alternatives": [{"transcript": self.transcript, "confidence": 0.9}],
                }
            ],
            "audio_bytes": audio_size,
        }

    async def handle_recognize(self, request):
        self._record(request)
        audio = await request.read()
        return web.json_response(self._results(len(audio)))

    async def handle_recognize_websocket(self, request):
        self._record(request)
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        received = 0
        async for message in ws:
            if message.type == WSMsgType.BINARY:
                received += len(message.data)
            elif message.type == WSMsgType.TEXT:
                action = message.json().get("action")
                if action == "start":
                    self.requests[-1]["opening_message"] = message.json()
                    if self.stream_error:
                        await ws.send_json({"error": self.stream_error})
                    else:
                        await ws.send_json({"state": "listening"})
                elif action == "stop":
                    await ws.send_json(self._results(received))
                    await ws.send_json({"state": "listening"})
                else:
                    await ws.send_json({"error": f"Unknown action: {action}"})
        return ws

    async def start(self, port: int = 0) -> int:
        """Starts serving on the loopback interface and returns the bound port"""
        self.runner = web.AppRunner(self.app)
        await self.runner.setup()
        site = web.TCPSite(self.runner, "127.0.0.1", port)
        await site.start()
        port = self.runner.addresses[0][1]
        self.logger.info(f"Server started on port {port}")
        return port

    async def stop(self) -> None:
        if self.runner is not None:
            await self.runner.cleanup()
