"""Authentication API endpoints.

The handlers are plain functions: FastAPI runs them in its thread pool, so
password hashing and database round trips never stall the event loop.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ipgeo_api.api.dependencies import (
    RateLimit,
    get_auth_service,
    get_token_claims,
    validated_body,
)
from ipgeo_api.schemas.auth import (
    AuthResponse,
    TokenValidationResponse,
    UserDetailResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from ipgeo_api.schemas.common import ErrorResponse
from ipgeo_api.services.auth import AuthService
from ipgeo_api.services.tokens import TokenClaims

router = APIRouter(
    prefix="/api",
    tags=["auth"],
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    },
)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("auth"))],
)
def register(
    user_data: Annotated[UserRegister, Depends(validated_body("register"))],
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Register a new user."""
    result = auth.register(user_data.email, user_data.password)

    return AuthResponse(
        message="Registration successful",
        user=UserResponse.model_validate(result.user),
        token=result.token,
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(RateLimit("auth"))],
)
def login(
    credentials: Annotated[UserLogin, Depends(validated_body("login"))],
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Login with email and password."""
    result = auth.login(credentials.email, credentials.password)

    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(result.user),
        token=result.token,
    )


@router.get(
    "/validate-token",
    response_model=TokenValidationResponse,
    dependencies=[Depends(RateLimit("general"))],
)
def validate_token(
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
):
    """Check the bearer token and return the user it belongs to."""
    user = auth.validate_token(claims)

    return TokenValidationResponse(user=UserDetailResponse.model_validate(user))
