from typing import Dict, Protocol, runtime_checkable


@runtime_checkable
class Authenticator(Protocol):
    async def headers(self) -> Dict[str, str]: ...


class BearerTokenAuthenticator:
    def __init__(self, bearer_token: str):
        if not bearer_token:
            raise ValueError("bearer_token must not be empty")
        self._bearer_token = bearer_token

    async def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._bearer_token}"}


class NoAuthAuthenticator:
    async def headers(self) -> Dict[str, str]:
        return {}
