from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings
from app.core.security import jwt_manager


def client_key(request: Request) -> str:
    """
    Bucket requests per signed-in user so students behind one NAT do not
    share a submission budget. Anonymous or badly signed requests fall
    back to the client address.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            payload = jwt_manager.verify_token(token)
        except HTTPException:
            payload = {}
        if payload.get("sub"):
            return f"user:{payload['sub']}"
    return f"addr:{get_remote_address(request)}"


limiter = Limiter(
    key_func=client_key,
    storage_uri=settings.rate_limit_storage,
    default_limits=[settings.redis_rate_limit],
    enabled=settings.rate_limit_enabled,
)


async def custom_rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={
            "error": f"Too many requests, limit is {exc.detail}",
            "type": "rate_limited",
        },
        headers={"Retry-After": "60"},
    )
