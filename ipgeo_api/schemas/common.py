"""Response envelope schemas shared by all endpoints."""

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single field-level validation failure."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Uniform failure envelope."""

    success: bool = False
    message: str
    errors: list[FieldError] | None = None


class HealthResponse(BaseModel):
    success: bool = True
    status: str
    environment: str
    timestamp: str
