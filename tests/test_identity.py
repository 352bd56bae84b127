import httpx
import pytest

from app.core.exceptions import Unauthorized, UpstreamFailure
from app.services.identity import FirebaseIdentityService


def _service(handler) -> FirebaseIdentityService:
    service = FirebaseIdentityService(api_key="test-key")
    service.client.max_retries = 1
    service.client._client = httpx.AsyncClient(
        base_url=service.client.base_url, transport=httpx.MockTransport(handler)
    )
    return service


async def test_verify_resolves_uid_and_email():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = request.content
        return httpx.Response(200, json={"users": [{"localId": "uid-1", "email": "a@example.com"}]})

    identity = await _service(handler).verify("id-token")

    assert identity.uid == "uid-1"
    assert identity.email == "a@example.com"
    assert seen["url"].endswith("/v1/accounts:lookup?key=test-key")
    assert b'"idToken":"id-token"' in seen["body"].replace(b" ", b"")


async def test_rejected_token_is_unauthorized():
    def handler(request):
        return httpx.Response(400, json={"error": {"message": "INVALID_ID_TOKEN"}})

    with pytest.raises(Unauthorized):
        await _service(handler).verify("bad")


async def test_lookup_without_users_is_unauthorized():
    with pytest.raises(Unauthorized):
        await _service(lambda request: httpx.Response(200, json={})).verify("orphan")


async def test_provider_outage_is_upstream_failure():
    with pytest.raises(UpstreamFailure):
        await _service(lambda request: httpx.Response(503)).verify("token")


async def test_missing_api_key_rejects(monkeypatch):
    monkeypatch.setattr("app.services.identity.settings.FIREBASE_API_KEY", None)
    with pytest.raises(Unauthorized):
        await FirebaseIdentityService().verify("token")
