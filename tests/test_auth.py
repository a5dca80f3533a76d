import httpx
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from listing_match.dependencies import auth


@pytest.fixture
def closed_breaker():
    auth.breaker.close()
    yield auth.breaker
    auth.breaker.close()


@pytest.fixture
def unreachable_user_service(monkeypatch):
    calls = []

    def mock_get(self, url, **kwargs):
        calls.append(url)
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(httpx.Client, "get", mock_get)
    return calls


@pytest.mark.asyncio
async def test_breaker_opens_after_repeated_verify_failures(closed_breaker, unreachable_user_service):
    for _ in range(closed_breaker.fail_max):
        with pytest.raises(Exception):
            await auth.verify_token("valid_token")
    assert closed_breaker.current_state == "open"

    # an open breaker fails fast without calling the service
    with pytest.raises(Exception):
        await auth.verify_token("valid_token")
    assert len(unreachable_user_service) == closed_breaker.fail_max


@pytest.mark.asyncio
async def test_unreachable_user_service_is_503(closed_breaker, unreachable_user_service):
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="valid_token")
    with pytest.raises(HTTPException) as exc_info:
        await auth.get_current_user(credentials)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_valid_token_yields_user(closed_breaker, monkeypatch):
    def mock_get(self, url, **kwargs):
        assert kwargs["headers"]["Authorization"] == "Bearer valid_token"
        return httpx.Response(200, json={"user_id": "6f1c2a9e-3d4b-4c5a-9e8f-0a1b2c3d4e5f"})

    monkeypatch.setattr(httpx.Client, "get", mock_get)
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="valid_token")
    user = await auth.get_current_user(credentials)
    assert auth.current_user_id(user) == "6f1c2a9e-3d4b-4c5a-9e8f-0a1b2c3d4e5f"


@pytest.mark.asyncio
async def test_rejected_token_is_401(closed_breaker, monkeypatch):
    monkeypatch.setattr(httpx.Client, "get", lambda self, url, **kwargs: httpx.Response(401))
    credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="expired")
    with pytest.raises(HTTPException) as exc_info:
        await auth.get_current_user(credentials)
    assert exc_info.value.status_code == 401
