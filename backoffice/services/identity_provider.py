"""
Identity provider: who is calling, and with which password.

The rest of the back office only depends on the IdentityProvider
contract. LocalIdentityProvider implements it over the identities
table with argon2 password hashes and HS256 bearer tokens.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from backoffice.config import Settings, get_settings
from backoffice.exceptions import (
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)
from backoffice.models.identity import Identity
from backoffice.time_utils import utcnow

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


@dataclass
class IdentityInfo:
    id: str
    email: str


class IdentityProvider(ABC):

    @abstractmethod
    def verify_token(self, token: str) -> IdentityInfo:
        """Resolve a bearer token, raising UnauthenticatedError if rejected."""

    @abstractmethod
    def create_user(self, email: str, password: str, metadata: dict) -> IdentityInfo:
        ...

    @abstractmethod
    def update_password(self, identity_id: str, new_password: str) -> None:
        ...

    @abstractmethod
    def update_email(self, identity_id: str, new_email: str) -> None:
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> str:
        """Return an access token, raising UnauthenticatedError on bad credentials."""


class LocalIdentityProvider(IdentityProvider):

    def __init__(self, db: Session, settings: Settings | None = None):
        self.db = db
        self.settings = settings or get_settings()

    def _by_email(self, email: str) -> Identity | None:
        return self.db.execute(
            select(Identity).where(Identity.email == email.strip().lower())
        ).scalar_one_or_none()

    def _issue_token(self, identity: Identity) -> str:
        expire = utcnow() + timedelta(
            minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        claims = {"sub": identity.id, "email": identity.email, "exp": expire}
        return jwt.encode(
            claims, self.settings.SECRET_KEY, algorithm=self.settings.ALGORITHM
        )

    def verify_token(self, token: str) -> IdentityInfo:
        try:
            payload = jwt.decode(
                token,
                self.settings.SECRET_KEY,
                algorithms=[self.settings.ALGORITHM],
            )
        except JWTError as e:
            logger.info("Token verification failed: %s", e)
            raise UnauthenticatedError("Invalid token")

        identity_id = payload.get("sub")
        identity = self.db.get(Identity, identity_id) if identity_id else None
        if identity is None:
            raise UnauthenticatedError("Invalid token")
        return IdentityInfo(id=identity.id, email=identity.email)

    def create_user(self, email: str, password: str, metadata: dict) -> IdentityInfo:
        if self._by_email(email):
            raise InvalidInputError(
                "A user with this email address has already been registered"
            )
        identity = Identity(
            email=email.strip().lower(),
            password_hash=pwd_context.hash(password),
            user_metadata=dict(metadata),
        )
        self.db.add(identity)
        self.db.flush()
        return IdentityInfo(id=identity.id, email=identity.email)

    def update_password(self, identity_id: str, new_password: str) -> None:
        identity = self.db.get(Identity, identity_id)
        if identity is None:
            raise NotFoundError("User not found")
        identity.password_hash = pwd_context.hash(new_password)
        self.db.flush()

    def update_email(self, identity_id: str, new_email: str) -> None:
        identity = self.db.get(Identity, identity_id)
        if identity is None:
            raise NotFoundError("User not found")
        existing = self._by_email(new_email)
        if existing and existing.id != identity_id:
            raise InvalidInputError(
                "A user with this email address has already been registered"
            )
        identity.email = new_email.strip().lower()
        self.db.flush()

    def sign_in(self, email: str, password: str) -> str:
        identity = self._by_email(email)
        if identity is None or not pwd_context.verify(password, identity.password_hash):
            raise UnauthenticatedError("Invalid login credentials")
        return self._issue_token(identity)
