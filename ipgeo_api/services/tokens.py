"""JWT token service.

Tokens are stateless: a token stays valid until it expires, there is no
server-side revocation list.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from ipgeo_api.exceptions import InvalidSignatureError, TokenExpiredError

DEFAULT_TTL = timedelta(days=7)


@dataclass(frozen=True)
class TokenClaims:
    """Identity decoded from a verified token."""

    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """Issue and verify signed, time-limited bearer tokens.

    Examples
    --------
    >>> service = TokenService(secret_key="secret")
    >>> token = service.issue(1, "user@example.com")
    >>> service.verify(token).user_id
    1
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("JWT secret key cannot be empty")

        self._secret_key = secret_key
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, user_id: int, email: str, ttl: timedelta | None = None) -> str:
        """Create a signed access token for a user."""
        issued_at = self._clock()
        expires_at = issued_at + (ttl if ttl is not None else self._ttl)
        to_encode = {
            "sub": str(user_id),
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify a token's signature and expiry and return its claims.

        Raises
        ------
        InvalidSignatureError
            If the token is malformed, tampered with, or lacks identity claims.
        TokenExpiredError
            If the signature is valid but the expiry has passed.
        """
        try:
            # Expiry is checked below against the injected clock.
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
            user_id = int(payload["sub"])
            email = payload["email"]
            issued_at = datetime.fromtimestamp(payload["iat"], tz=UTC)
            expires_at = datetime.fromtimestamp(payload["exp"], tz=UTC)
        except (JWTError, KeyError, TypeError, ValueError) as e:
            raise InvalidSignatureError() from e

        if self._clock() > expires_at:
            raise TokenExpiredError()

        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=issued_at,
            expires_at=expires_at,
        )
