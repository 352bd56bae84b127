from typing import Protocol

import httpx
from loguru import logger

from app.core.base_client import BaseClient
from app.core.config import settings
from app.core.exceptions import Unauthorized, UpstreamFailure
from app.core.version import __version__
from app.models.profile import Identity


class IdentityVerifier(Protocol):
    async def verify(self, id_token: str) -> Identity: ...

    async def close(self) -> None: ...


class IdentityToolkitClient(BaseClient):
    """
    Client for the Firebase Identity Toolkit REST API.
    """

    def __init__(self, api_key: str, timeout: float = settings.IDENTITY_TIMEOUT_SECONDS, max_retries: int = 2):
        headers = {
            "User-Agent": f"TasteMatch/{__version__}",
            "Accept": "application/json",
        }
        super().__init__(
            base_url="https://identitytoolkit.googleapis.com/v1",
            timeout=timeout,
            max_retries=max_retries,
            headers=headers,
        )
        self.api_key = api_key

    async def lookup(self, id_token: str) -> dict:
        return await self.post("/accounts:lookup", json={"idToken": id_token}, params={"key": self.api_key})


class FirebaseIdentityService:
    """
    Resolves a Firebase ID token to the signed-in user's uid and email.
    """

    def __init__(self, api_key: str | None = None):
        self.client: IdentityToolkitClient | None = None
        if api_key := api_key or settings.FIREBASE_API_KEY:
            self.client = IdentityToolkitClient(api_key)
        else:
            logger.warning("FIREBASE_API_KEY not set. Authenticated endpoints will reject every request.")

    async def verify(self, id_token: str) -> Identity:
        if not self.client:
            raise Unauthorized("Unauthorized: Identity verification is not configured")

        try:
            data = await self.client.lookup(id_token)
        except httpx.HTTPStatusError as e:
            if e.response.status_code < 500:
                raise Unauthorized("Unauthorized: Invalid token") from e
            raise UpstreamFailure("Identity provider request failed.") from e
        except httpx.RequestError as e:
            raise UpstreamFailure("Identity provider unreachable.") from e

        users = data.get("users") or []
        if not users or not users[0].get("localId"):
            raise Unauthorized("Unauthorized: Invalid token")

        user = users[0]
        return Identity(uid=user["localId"], email=user.get("email"))

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
