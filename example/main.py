import asyncio

from speech_server import SpeechServer
from speech_to_text_client.errors import PollTimeoutError, SpeechToTextError
from speech_to_text_client.speech_to_text_client import SpeechToTextV1


async def status_changed(model, status_class):
    print(f"Customization {model.customization_id} is {model.status} ({status_class.value})")


async def main():
    server = SpeechServer(
        corpora_statuses=[["being_processed"], ["being_processed"], ["analyzed"]],
        model_statuses=["pending", "training", "training", "available"],
    )
    port = await server.start()
    print(f"Server started on http://127.0.0.1:{port}")

    client = SpeechToTextV1(service_url=f"http://127.0.0.1:{port}")

    try:
        corpora = await client.when_corpora_analyzed("demo", interval=500, times=10)
        print(f"Corpora analyzed: {[corpus.name for corpus in corpora.corpora]}")

        model = await client.when_customization_ready(
            "demo", interval=500, times=10, on_status_change=status_changed
        )
        print(f"Final status: {model.status}")

        async with client.recognize_using_websocket(
            content_type="audio/l16; rate=16000", language_customization_id="demo"
        ) as stream:
            await stream.send_audio(b"\x00" * 3200)
            await stream.stop()
            async for message in stream.results():
                print(f"Transcript: {message['results'][0]['alternatives'][0]['transcript']}")
    except PollTimeoutError as e:
        print(f"Polling timed out: {e}")
    except SpeechToTextError as e:
        print(f"Error occurred ({e.kind.value}): {e}")
    finally:
        await server.stop()


if __name__ == "__main__":
    asyncio.run(main())
