"""Password hashing with bcrypt."""

from passlib.context import CryptContext

from ipgeo_api.exceptions import CorruptCredentialError

DEFAULT_ROUNDS = 10


class PasswordHasher:
    """Salted one-way hashing and verification of credentials.

    The bcrypt salt is embedded in every hash, so hashing the same password
    twice yields two different strings that both verify. ``rounds`` is the
    bcrypt cost factor; each increment doubles the work.

    Both operations are CPU-bound and block the calling thread. Callers on
    the event loop must run them in a worker thread.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Hash a password."""
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        """Verify a password against its hash.

        Returns False on mismatch. Raises CorruptCredentialError when the
        stored hash is not a recognisable bcrypt hash.
        """
        try:
            return self._context.verify(password, password_hash)
        except (ValueError, TypeError) as e:
            raise CorruptCredentialError(f"Stored password hash is malformed: {e}") from e
