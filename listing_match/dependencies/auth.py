import asyncio

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import httpx
from listing_match.config import settings
from structlog import get_logger
from pybreaker import CircuitBreaker

logger = get_logger()
security = HTTPBearer()
breaker = CircuitBreaker(fail_max=3, reset_timeout=60)


@breaker
def _verify(token: str) -> httpx.Response:
    # pybreaker only observes synchronous calls
    with httpx.Client(timeout=10.0) as client:
        return client.get(
            f"{settings.USER_MANAGEMENT_URL}/auth/verify",
            headers={"Authorization": f"Bearer {token}"},
        )


async def verify_token(token: str) -> httpx.Response:
    return await asyncio.to_thread(_verify, token)


async def get_current_user(credentials: HTTPAuthorizationCredentials = Security(security)) -> dict:
    try:
        response = await verify_token(credentials.credentials)
    except Exception as e:
        logger.error("Token verification unavailable", error=str(e))
        raise HTTPException(status_code=503, detail="Authentication service unavailable")
    if response.status_code != 200:
        logger.error("Token verification failed", status_code=response.status_code)
        raise HTTPException(status_code=401, detail="Invalid token")
    user = response.json()
    if not user.get("user_id"):
        logger.error("Token verification returned no user id")
        raise HTTPException(status_code=401, detail="Invalid token")
    return user


def current_user_id(user: dict = Depends(get_current_user)) -> str:
    return str(user["user_id"])
