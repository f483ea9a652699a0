"""Authentication schemas."""

from datetime import datetime

import email_validator
from email_validator import EmailNotValidError, validate_email
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

MIN_PASSWORD_LENGTH = 6

# Addresses are checked for syntax only, so reserved domains such as .local and .test pass
email_validator.SPECIAL_USE_DOMAIN_NAMES = []


class UserLogin(BaseModel):
    """User login request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email_format(cls, value: str) -> str:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as e:
            raise PydanticCustomError("email_format", "Invalid email format") from e
        # Stored and looked up exactly as submitted
        return value

    @field_validator("password")
    @classmethod
    def check_password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise PydanticCustomError(
                "password_too_short",
                "Password must be at least {min_length} characters",
                {"min_length": MIN_PASSWORD_LENGTH},
            )
        return value


class UserRegister(UserLogin):
    """User registration request."""

    confirm_password: str | None = Field(
        default=None,
        alias="confirmPassword",
        validate_default=True,
    )

    @field_validator("confirm_password")
    @classmethod
    def check_passwords_match(cls, value: str | None, info: ValidationInfo) -> str | None:
        # Only comparable once password itself passed validation
        if "password" in info.data and value != info.data["password"]:
            raise PydanticCustomError("password_mismatch", "Passwords do not match")
        return value


class UserResponse(BaseModel):
    """Public user information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class UserDetailResponse(UserResponse):
    """Public user information including creation time."""

    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    success: bool = True
    message: str
    user: UserResponse
    token: str


class TokenValidationResponse(BaseModel):
    """Response for a successfully validated token."""

    success: bool = True
    message: str = "Token is valid"
    user: UserDetailResponse
