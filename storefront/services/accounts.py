"""User accounts: password hashing, registration, login and access tokens."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.errors import AuthenticationError, ValidationError
from storefront.models import User

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_in: int


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def issue_access_token(user_id: int) -> AccessToken:
    lifetime = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    token = jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return AccessToken(token=token, expires_in=int(lifetime.total_seconds()))


def user_id_from_token(token: str) -> int | None:
    """Return the user id of a valid, unexpired access token; None otherwise.

    Tokens without a "type" claim are treated as access tokens.
    """
    try:
        claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
    if claims.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
        return None
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None


class AccountService:
    def __init__(self, db: Session):
        self.db = db

    def _by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def register(self, email: str, password: str, display_name: str | None = None) -> User:
        if self._by_email(email) is not None:
            raise ValidationError("Email already registered")
        user = User(email=email, display_name=display_name, hashed_password=hash_password(password))
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user id=%s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._by_email(email)
        if user is None or not _pwd_context.verify(password, user.hashed_password):
            logger.info("Rejected login for %s", email)
            raise AuthenticationError("Incorrect email or password")
        return user

    def get(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)
