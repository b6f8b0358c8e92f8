"""Authentication for fastwell."""

from .identity import AuthSession, Credentials, Identity, IdentityProvider
from .tokens import decode_token, issue_token

__all__ = [
    "AuthSession",
    "Credentials",
    "decode_token",
    "Identity",
    "IdentityProvider",
    "issue_token",
]
