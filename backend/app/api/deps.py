"""API Dependencies — identity resolution and the injected search cache.

Invariants:
    - get_current_user_id never returns None: missing, malformed, expired or
      badly signed tokens all raise AuthenticationRequiredError (401)
    - The token comes from the auth cookie first, then an Authorization: Bearer
      header
    - The user id is the token's userId claim, parsed as a UUID

Design Decisions:
    - Tokens are issued elsewhere; this service only verifies them (PyJWT)
    - get_search_cache reads app.state so tests can override it per client
"""

import logging
from uuid import UUID

import jwt
from fastapi import Request

from app.config import get_settings
from app.core.errors import AuthenticationRequiredError
from app.services.search_cache import SearchResultCache

logger = logging.getLogger(__name__)


def _extract_token(request: Request, cookie_name: str) -> str | None:
    token = request.cookies.get(cookie_name)
    if token:
        return token
    header = request.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def decode_user_id(token: str, secret: str, algorithm: str = "HS256") -> UUID:
    """Verify a token and return its userId claim."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError as e:
        raise AuthenticationRequiredError("Token has expired") from e
    except jwt.PyJWTError as e:
        raise AuthenticationRequiredError("Invalid token") from e

    raw = payload.get("userId")
    if raw is None:
        raise AuthenticationRequiredError("Token has no userId claim")
    try:
        return UUID(str(raw))
    except ValueError as e:
        raise AuthenticationRequiredError("Invalid token") from e


async def get_current_user_id(request: Request) -> UUID:
    """FastAPI dependency: requesting user's id, or 401."""
    settings = get_settings()
    token = _extract_token(request, settings.auth_cookie_name)
    if token is None:
        raise AuthenticationRequiredError()
    return decode_user_id(token, settings.jwt_secret, settings.jwt_algorithm)


def get_search_cache(request: Request) -> SearchResultCache:
    """FastAPI dependency: the search cache owned by the application."""
    return request.app.state.search_cache
