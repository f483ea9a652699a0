"""FastAPI dependencies for authentication, validation and rate limiting."""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ipgeo_api.database import get_db
from ipgeo_api.exceptions import MissingTokenError, RateLimitedError, ValidationError
from ipgeo_api.schemas.validation import validate_payload
from ipgeo_api.services.auth import AuthService
from ipgeo_api.services.ip_info import IPInfoService
from ipgeo_api.services.passwords import PasswordHasher
from ipgeo_api.services.rate_limit import RateLimiter
from ipgeo_api.services.tokens import TokenClaims, TokenService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def client_id(request: Request) -> str:
    """Identify the calling client by its source address."""
    return request.client.host if request.client else "unknown"


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_ip_info_service(request: Request) -> IPInfoService:
    return request.app.state.ip_info_service


def get_auth_service(
    db: Annotated[Session, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthService:
    """Get auth service with dependencies."""
    return AuthService(db, hasher, tokens)


def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> TokenClaims:
    """Verify the bearer token and return the identity it carries.

    A missing header, a non-Bearer scheme and an empty token all count as
    missing. Expired and forged tokens propagate their own errors.
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()
    return tokens.verify(credentials.credentials)


class RateLimit:
    """Dependency enforcing one of the limiters registered on the app."""

    def __init__(self, limiter_name: str):
        self.limiter_name = limiter_name

    async def __call__(self, request: Request, response: Response) -> None:
        limiter: RateLimiter = request.app.state.rate_limiters[self.limiter_name]
        client = client_id(request)
        result = limiter.hit(client)

        headers = {
            "RateLimit-Limit": str(result.limit),
            "RateLimit-Remaining": str(result.remaining),
            "RateLimit-Reset": str(result.reset_after),
        }
        if not result.allowed:
            logger.warning(
                f"Rate limit '{self.limiter_name}' exceeded by {client} "
                f"on {request.method} {request.url.path}"
            )
            raise RateLimitedError(
                limiter.message,
                headers={**headers, "Retry-After": str(result.reset_after)},
            )
        # Kept for the error pipeline when a later dependency rejects the request
        request.state.rate_limit_headers = headers
        response.headers.update(headers)


def validated_body(schema_name: str) -> Callable[[Request], Awaitable[BaseModel]]:
    """Build a dependency that validates the JSON body against a named schema."""

    async def dependency(request: Request) -> BaseModel:
        try:
            payload = await request.json()
        except ValueError as e:
            raise ValidationError([{"field": "body", "message": "Malformed JSON body"}]) from e
        return _check(schema_name, payload)

    return dependency


def validated_query(schema_name: str) -> Callable[[Request], Awaitable[BaseModel]]:
    """Build a dependency that validates query parameters against a named schema."""

    async def dependency(request: Request) -> BaseModel:
        return _check(schema_name, dict(request.query_params))

    return dependency


def _check(schema_name: str, payload: object) -> BaseModel:
    result = validate_payload(schema_name, payload)
    if not result.is_valid:
        logger.warning(f"Validation error: {result.errors}")
        raise ValidationError(result.errors)
    return result.data
