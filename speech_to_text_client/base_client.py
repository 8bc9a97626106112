from typing import Any, Dict, Optional

import aiohttp
from loguru import logger
from speech_to_text_client.authenticators import Authenticator, NoAuthAuthenticator
from speech_to_text_client.common import get_sdk_headers
from speech_to_text_client.errors import InvalidArgumentError
from speech_to_text_client.models import Corpora, DetailedResponse, LanguageModel

SERVICE_NAME = "speech_to_text"
SERVICE_VERSION = "v1"
DEFAULT_SERVICE_URL = "https://api.us-south.speech-to-text.watson.cloud.ibm.com"


class BaseSpeechToTextClient:
    """Plain REST operations of the speech-to-text service"""

    def __init__(
        self,
        service_url: str = DEFAULT_SERVICE_URL,
        authenticator: Optional[Authenticator] = None,
        connector: Optional[aiohttp.BaseConnector] = None,
        disable_ssl_verification: bool = False,
        default_headers: Optional[Dict[str, str]] = None,
    ):
        self.service_url = service_url.rstrip("/")
        self.authenticator = authenticator or NoAuthAuthenticator()
        self.connector = connector
        self.disable_ssl_verification = disable_ssl_verification
        self.default_headers = dict(default_headers or {})
        self.logger = logger

    def _session(self) -> aiohttp.ClientSession:
        # A caller-supplied connector is shared, so the session must not close it.
        return aiohttp.ClientSession(
            connector=self.connector, connector_owner=self.connector is None
        )

    async def _request(
        self,
        method: str,
        path: str,
        operation_id: str,
        params: Optional[Dict[str, Any]] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> DetailedResponse:
        url = f"{self.service_url}{path}"
        request_headers = {
            "Accept": "application/json",
            **get_sdk_headers(SERVICE_NAME, SERVICE_VERSION, operation_id),
            **self.default_headers,
            **await self.authenticator.headers(),
            **(headers or {}),
        }
        query = {
            key: _query_value(value) for key, value in (params or {}).items() if value is not None
        }
        request_kwargs = {}
        if self.disable_ssl_verification:
            request_kwargs["ssl"] = False

        try:
            async with self._session() as session:
                async with session.request(
                    method,
                    url,
                    params=query,
                    data=data,
                    headers=request_headers,
                    **request_kwargs,
                ) as response:
                    response.raise_for_status()
                    result = await response.json()
                    return DetailedResponse(
                        result=result,
                        status=response.status,
                        headers=dict(response.headers),
                    )
        except aiohttp.ClientResponseError as e:
            self.logger.error(f"HTTP error {e.status} at {url}: {e.message}")
            raise
        except aiohttp.ClientError as e:
            self.logger.error(f"Request to {url} failed: {e}")
            raise

    async def list_corpora(self, customization_id: str) -> Corpora:
        _require("customization_id", customization_id)
        response = await self._request(
            "GET", f"/v1/customizations/{customization_id}/corpora", "listCorpora"
        )
        return Corpora.model_validate(response.result)

    async def get_language_model(self, customization_id: str) -> LanguageModel:
        _require("customization_id", customization_id)
        response = await self._request(
            "GET", f"/v1/customizations/{customization_id}", "getLanguageModel"
        )
        return LanguageModel.model_validate(response.result)

    async def recognize(
        self, audio: Any, content_type: Optional[str] = None, **params: Any
    ) -> DetailedResponse:
        """Sends the whole of ``audio`` in one request and returns the recognition results.

        Extra keyword arguments are sent as query parameters, e.g. ``model`` or
        ``language_customization_id``.
        """
        _require("audio", audio)
        headers = {"Content-Type": content_type} if content_type else None
        return await self._request(
            "POST", "/v1/recognize", "recognize", params=params, data=audio, headers=headers
        )


def _require(name: str, value: Any) -> None:
    if value is None or (isinstance(value, str) and not value):
        raise InvalidArgumentError(f"Missing required parameter: {name}")


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    return value
