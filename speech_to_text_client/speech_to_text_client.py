import os
from typing import Any, Dict, FrozenSet, Optional

from speech_to_text_client.authenticators import BearerTokenAuthenticator
from speech_to_text_client.base_client import (
    DEFAULT_SERVICE_URL,
    SERVICE_NAME,
    SERVICE_VERSION,
    BaseSpeechToTextClient,
)
from speech_to_text_client.common import get_sdk_headers, is_stream
from speech_to_text_client.errors import (
    InvalidArgumentError,
    NoCorporaError,
    TransportError,
)
from speech_to_text_client.models import (
    DEFAULT_INTERVAL,
    DEFAULT_TIMES,
    Corpora,
    DetailedResponse,
    ErrorKind,
    LanguageModel,
    PollConfig,
)
from speech_to_text_client.polling import (
    DEFAULT_RETRY_ON,
    StatusChangeCallback,
    poll_until_terminal,
)
from speech_to_text_client.recognize_stream import (
    RecognizeStream,
    RecognizeStreamOptions,
    RecognizeWebSocketParams,
)
from speech_to_text_client.status import (
    CorporaAnalysisCheck,
    CustomizationReadinessCheck,
)

TRUTHY = {"1", "true", "yes"}


class SpeechToTextV1(BaseSpeechToTextClient):
    @classmethod
    def from_environment(cls, **kwargs: Any) -> "SpeechToTextV1":
        """Builds a client from SPEECH_TO_TEXT_* environment variables; kwargs override them"""
        options: Dict[str, Any] = {
            "service_url": os.environ.get("SPEECH_TO_TEXT_URL", DEFAULT_SERVICE_URL),
            "disable_ssl_verification": os.environ.get(
                "SPEECH_TO_TEXT_DISABLE_SSL", ""
            ).lower()
            in TRUTHY,
        }
        token = os.environ.get("SPEECH_TO_TEXT_BEARER_TOKEN")
        if token:
            options["authenticator"] = BearerTokenAuthenticator(token)
        options.update(kwargs)
        return cls(**options)

    async def when_corpora_analyzed(
        self,
        customization_id: str,
        *,
        interval: int = DEFAULT_INTERVAL,
        times: int = DEFAULT_TIMES,
        retry_on: FrozenSet[ErrorKind] = DEFAULT_RETRY_ON,
        on_status_change: Optional[StatusChangeCallback] = None,
    ) -> Corpora:
        """Waits while any corpus is 'being_processed' and returns the corpora once one is 'analyzed'.

        Raises NoCorporaError straight away when the customization has no corpora.
        """
        config = PollConfig(interval=interval, times=times)

        try:
            corpora = await self.list_corpora(customization_id)
        except InvalidArgumentError:
            raise
        except Exception as e:
            raise TransportError(f"Unable to list corpora: {e}") from e
        if not corpora.corpora:
            raise NoCorporaError(
                "Customization has no corpora and therefore corpus cannot be analyzed"
            )

        return await poll_until_terminal(
            lambda: self.list_corpora(customization_id),
            CorporaAnalysisCheck(),
            config=config,
            retry_on=retry_on,
            on_status_change=on_status_change,
        )

    async def when_customization_ready(
        self,
        customization_id: str,
        *,
        interval: int = DEFAULT_INTERVAL,
        times: int = DEFAULT_TIMES,
        retry_on: FrozenSet[ErrorKind] = DEFAULT_RETRY_ON,
        on_status_change: Optional[StatusChangeCallback] = None,
    ) -> LanguageModel:
        """Waits while a customization is 'pending' or 'training', returns it once 'ready' or 'available'.

        A customization stays 'pending' until at least one corpus or word is added.
        """
        config = PollConfig(interval=interval, times=times)
        if not customization_id:
            raise InvalidArgumentError("Missing required parameter: customization_id")

        return await poll_until_terminal(
            lambda: self.get_language_model(customization_id),
            CustomizationReadinessCheck(),
            config=config,
            retry_on=retry_on,
            on_status_change=on_status_change,
        )

    def recognize_using_websocket(
        self, headers: Optional[Dict[str, str]] = None, **params: Any
    ) -> RecognizeStream:
        """Returns an unopened RecognizeStream; use it with ``async with`` or call ``connect()``.

        Caller headers override the diagnostic SDK headers of the same name.
        """
        websocket_params = RecognizeWebSocketParams(**params)
        sdk_headers = get_sdk_headers(
            SERVICE_NAME, SERVICE_VERSION, "recognizeUsingWebSocket"
        )
        options = RecognizeStreamOptions(
            authenticator=self.authenticator,
            service_url=self.service_url,
            connector=self.connector,
            disable_ssl_verification=self.disable_ssl_verification,
            headers={**sdk_headers, **self.default_headers, **(headers or {})},
            query_params=websocket_params.query_params(),
            opening_message=websocket_params.opening_message(),
        )
        return RecognizeStream(options)

    async def recognize(
        self, audio: Any, content_type: Optional[str] = None, **params: Any
    ) -> DetailedResponse:
        if audio is not None and is_stream(audio) and not content_type:
            raise InvalidArgumentError(
                "If providing `audio` as a stream, `content_type` is required."
            )
        return await super().recognize(audio, content_type, **params)
