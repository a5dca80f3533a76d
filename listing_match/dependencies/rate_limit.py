from fastapi import Request, Response
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter

_limiter = RateLimiter(times=5, seconds=60)


async def llm_rate_limit(request: Request, response: Response):
    """Rate limit for endpoints that call the language model; off when Redis was not initialised."""
    if FastAPILimiter.redis is None:
        return
    await _limiter(request, response)
