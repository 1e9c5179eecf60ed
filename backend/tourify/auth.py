"""
Tourify Backend — Bearer Token Authentication
==============================================

What:  FastAPI dependency that turns `Authorization: Bearer <jwt>` into the
       requester id (the token's `sub` claim).
How:   The token signature is verified against the identity provider's JWKS
       (PyJWT PyJWKClient, keys cached per URL). Audience and issuer are
       checked when configured.

Failures:
    no header / not Bearer            → AuthenticationError (401)
    bad signature, expired, no `sub`  → AuthenticationError (401)
    JWKS_URL not configured           → ServiceUnavailableError (503)

Services never read headers: routes pass the returned id explicitly.
"""

import logging
from functools import lru_cache
from typing import Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.concurrency import run_in_threadpool

from tourify.config import settings
from tourify.exceptions import AuthenticationError, ServiceUnavailableError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache(maxsize=4)
def get_jwks_client(jwks_url: str) -> jwt.PyJWKClient:
    return jwt.PyJWKClient(jwks_url, cache_keys=True)


def decode_token(token: str) -> dict:
    """
    Verify a JWT and return its claims.

    Blocking: the first call per key id fetches the JWKS over HTTP.
    """
    signing_key = get_jwks_client(settings.jwks_url).get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=settings.jwt_algorithms_list,
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
        options={
            "require": ["sub"],
            "verify_aud": settings.jwt_audience is not None,
        },
    )


async def get_requester_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    """
    Resolve the authenticated requester.

    Example:
        @router.get("/tours")
        async def list_tours(requester_id: str = Depends(get_requester_id)):
            ...
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()

    if not settings.jwks_url:
        logger.error("JWKS_URL is not configured; rejecting authenticated request")
        raise ServiceUnavailableError(message="Authentication is not configured")

    try:
        claims = await run_in_threadpool(decode_token, credentials.credentials)
    except jwt.PyJWTError as e:
        logger.warning("Token verification failed: %s", e)
        raise AuthenticationError(message="Invalid or expired token")

    subject = claims.get("sub")
    if not isinstance(subject, str) or not subject:
        raise AuthenticationError(message="Invalid or expired token")
    return subject
