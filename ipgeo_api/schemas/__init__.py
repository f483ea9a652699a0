"""Pydantic schemas for API requests and responses."""

from ipgeo_api.schemas.auth import (
    AuthResponse,
    TokenValidationResponse,
    UserDetailResponse,
    UserLogin,
    UserRegister,
    UserResponse,
)
from ipgeo_api.schemas.common import ErrorResponse, FieldError, HealthResponse
from ipgeo_api.schemas.ip_info import IpInfoResponse, IpLookupQuery
from ipgeo_api.schemas.validation import ValidationResult, validate_payload

__all__ = [
    "UserRegister",
    "UserLogin",
    "UserResponse",
    "UserDetailResponse",
    "AuthResponse",
    "TokenValidationResponse",
    "IpLookupQuery",
    "IpInfoResponse",
    "ErrorResponse",
    "FieldError",
    "HealthResponse",
    "ValidationResult",
    "validate_payload",
]
