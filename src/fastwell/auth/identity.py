"""Identity provider: accounts, sign in/out and current-user resolution."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import bcrypt
from pydantic import BaseModel, Field, ValidationError

from ..config import Settings
from ..db.store import DocumentStore
from ..exceptions import AuthenticationError, InvalidInputError
from ..models.timestamps import utc_now
from .tokens import decode_token, issue_token

logger = logging.getLogger(__name__)

USER_ACCOUNTS = "user_accounts"
REVOKED_TOKENS = "revoked_tokens"

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MIN_PASSWORD_LENGTH = 6


class Credentials(BaseModel):
    """Email/password pair accepted by sign up and sign in."""

    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)


@dataclass
class Identity:
    """An authenticated user."""

    id: str
    email: str
    display_name: str | None = None

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "displayName": self.display_name}


@dataclass
class AuthSession:
    """Result of a successful sign in or sign up."""

    token: str
    identity: Identity
    expires_at: datetime


IdentityListener = Callable[[Identity | None], None]


def _validate(email: str, password: str) -> Credentials:
    try:
        return Credentials(email=email.strip().lower(), password=password)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        raise InvalidInputError(f"Invalid credentials: check {fields}")


class IdentityProvider:
    """Email/password accounts stored in the document store.

    Listeners registered with add_listener receive the Identity after a
    sign in or sign up and None after a sign out.
    """

    def __init__(
        self,
        store: DocumentStore,
        secret_key: str,
        token_ttl_hours: int = 24,
        bcrypt_rounds: int = 12,
    ):
        self.store = store
        self.secret_key = secret_key
        self.token_ttl_hours = token_ttl_hours
        self.bcrypt_rounds = bcrypt_rounds
        self._listeners: list[IdentityListener] = []

    @classmethod
    def from_settings(cls, store: DocumentStore, settings: Settings) -> "IdentityProvider":
        return cls(store, settings.secret_key, settings.token_ttl_hours, settings.bcrypt_rounds)

    def add_listener(self, listener: IdentityListener) -> Callable[[], None]:
        """Register for auth state changes. Returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def _notify(self, identity: Identity | None) -> None:
        for listener in list(self._listeners):
            try:
                listener(identity)
            except Exception:
                logger.exception("Auth listener failed")

    async def sign_up(self, email: str, password: str, display_name: str | None = None) -> AuthSession:
        """Create an account and sign it in."""
        creds = _validate(email, password)
        if await self._find_account(creds.email) is not None:
            raise InvalidInputError("Email already registered")

        password_hash = bcrypt.hashpw(
            creds.password.encode("utf-8"), bcrypt.gensalt(rounds=self.bcrypt_rounds)
        ).decode("utf-8")
        user_id = await self.store.create(
            USER_ACCOUNTS,
            {
                "email": creds.email,
                "passwordHash": password_hash,
                "displayName": display_name,
                "createdAt": utc_now(),
            },
        )
        logger.info("Registered user %s", user_id)
        return self._start_session(Identity(user_id, creds.email, display_name))

    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Check credentials and issue a session token."""
        creds = _validate(email, password)
        account = await self._find_account(creds.email)
        if account is None or not bcrypt.checkpw(
            creds.password.encode("utf-8"), account["passwordHash"].encode("utf-8")
        ):
            raise AuthenticationError("Incorrect email or password")

        return self._start_session(
            Identity(account["id"], account["email"], account.get("displayName"))
        )

    async def sign_out(self, token: str) -> None:
        """Revoke a session token."""
        claims = decode_token(token, self.secret_key)
        await self.store.set(
            REVOKED_TOKENS,
            claims["jti"],
            {"userId": claims["sub"], "revokedAt": utc_now()},
        )
        self._notify(None)

    async def current_user(self, token: str | None) -> Identity | None:
        """Resolve a token to its user, or None when it is missing or invalid."""
        if not token:
            return None
        try:
            claims = decode_token(token, self.secret_key)
        except AuthenticationError:
            return None

        if await self.store.get(REVOKED_TOKENS, claims["jti"]) is not None:
            return None

        account = await self.store.get(USER_ACCOUNTS, claims["sub"])
        if account is None:
            return None
        return Identity(account["id"], account["email"], account.get("displayName"))

    async def _find_account(self, email: str) -> dict | None:
        matches = await self.store.query(USER_ACCOUNTS, [("email", "==", email)], limit=1)
        return matches[0] if matches else None

    def _start_session(self, identity: Identity) -> AuthSession:
        token, expires_at = issue_token(identity.id, self.secret_key, self.token_ttl_hours)
        self._notify(identity)
        return AuthSession(token=token, identity=identity, expires_at=expires_at)
