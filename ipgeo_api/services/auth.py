"""Authentication service for registration, login and token validation."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ipgeo_api.exceptions import DuplicateEmailError, InvalidCredentialsError, UserNotFoundError
from ipgeo_api.models.user import User
from ipgeo_api.services.passwords import PasswordHasher
from ipgeo_api.services.tokens import TokenClaims, TokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """An authenticated user and the token issued for them."""

    user: User
    token: str


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email."""
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """Get a user by id."""
    return db.get(User, user_id)


def create_user(db: Session, email: str, password_hash: str) -> User:
    """Insert a new user.

    Raises DuplicateEmailError when the unique constraint on email rejects
    the insert, which happens if another request registered the same email
    after our existence check.
    """
    user = User(email=email, password_hash=password_hash)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Registration race lost for existing email: {email}")
        raise DuplicateEmailError() from e
    db.refresh(user)
    return user


class AuthService:
    """Orchestrates credential storage, hashing and token issuance.

    All methods are blocking: they hash passwords and talk to the database
    synchronously, so they must be called from a worker thread.
    """

    def __init__(self, db: Session, hasher: PasswordHasher, tokens: TokenService) -> None:
        self.db = db
        self.hasher = hasher
        self.tokens = tokens

    def register(self, email: str, password: str) -> AuthResult:
        """Create an account and issue its first token."""
        if get_user_by_email(self.db, email) is not None:
            logger.warning(f"Registration attempt with existing email: {email}")
            raise DuplicateEmailError()

        user = create_user(self.db, email, self.hasher.hash(password))
        logger.info(f"New user registered: {email}")

        return AuthResult(user=user, token=self.tokens.issue(user.id, user.email))

    def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue a token.

        Unknown emails and wrong passwords raise the same error.
        """
        user = get_user_by_email(self.db, email)
        if user is None:
            logger.warning(f"Login attempt with non-existent email: {email}")
            raise InvalidCredentialsError()

        if not self.hasher.verify(password, user.password_hash):
            logger.warning(f"Failed login attempt for: {email}")
            raise InvalidCredentialsError()

        logger.info(f"User logged in: {email}")
        return AuthResult(user=user, token=self.tokens.issue(user.id, user.email))

    def validate_token(self, claims: TokenClaims) -> User:
        """Return the user a verified token belongs to.

        The token has already been verified; the lookup catches users that
        disappeared while their token is still cryptographically valid.
        """
        user = get_user_by_id(self.db, claims.user_id)
        if user is None:
            logger.warning(f"Valid token for missing user id {claims.user_id}")
            raise UserNotFoundError()
        return user
