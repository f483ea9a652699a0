"""Application exceptions.

Every failure the API can report is an ``ApiError`` subclass carrying the
HTTP status and the client-facing message. The handlers in
``ipgeo_api.api.errors`` turn them into the uniform error envelope.
"""

from fastapi import status


class ApiError(Exception):
    """Base exception for all errors reported to API clients."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        self.message = message or self.default_message
        self.headers = headers
        super().__init__(self.message)


class ValidationError(ApiError):
    """Raised when a request payload fails schema validation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"

    def __init__(self, errors: list[dict[str, str]], message: str | None = None):
        self.errors = errors
        super().__init__(message)


class DuplicateEmailError(ApiError):
    """Raised when registering an email that is already stored."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Email already registered"


class InvalidCredentialsError(ApiError):
    """Raised for an unknown email or a wrong password. The two cases are indistinguishable."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class MissingTokenError(ApiError):
    """Raised when a protected route is called without a bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access token required"

    def __init__(self, message: str | None = None):
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class InvalidSignatureError(ApiError):
    """Raised when a token is malformed or its signature does not match."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Invalid token"


class TokenExpiredError(ApiError):
    """Raised when a correctly signed token is past its expiry."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Token has expired"


class UserNotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class IpNotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "IP address not found"


class RouteNotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Route not found"


class RateLimitedError(ApiError):
    """Raised when a client exceeds the request budget of a rate-limit class."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, please try again later"


class CorruptCredentialError(ApiError):
    """Raised when a stored password hash cannot be parsed."""

    default_message = "Internal server error"


class UnhandledError(ApiError):
    default_message = "Internal server error"


class StoreUnavailableError(ApiError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Database unavailable"


class UpstreamUnavailableError(ApiError):
    """Raised when the geolocation provider fails or answers with an error."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Failed to fetch IP information"


class UpstreamTimeoutError(ApiError):
    """Raised when the geolocation provider does not answer within the timeout."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "Request timeout - IP service unavailable"
