"""Shared FastAPI dependencies."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..auth import Identity, IdentityProvider
from ..db.repositories import (
    FastingSessionRepository,
    UserProfileRepository,
    WeightEntryRepository,
)
from ..db.store import DocumentStore
from ..services.ai_requests import AIRequestService

bearer = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_ai_service(request: Request) -> AIRequestService:
    return request.app.state.ai_service


def get_token(credentials: HTTPAuthorizationCredentials | None = Depends(bearer)) -> str:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return credentials.credentials


async def get_current_identity(
    token: str = Depends(get_token),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    """Resolve the bearer token to the signed-in user."""
    identity = await identity_provider.current_user(token)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return identity


def get_fasting_repo(store: DocumentStore = Depends(get_store)) -> FastingSessionRepository:
    return FastingSessionRepository(store)


def get_weight_repo(store: DocumentStore = Depends(get_store)) -> WeightEntryRepository:
    return WeightEntryRepository(store)


def get_profile_repo(store: DocumentStore = Depends(get_store)) -> UserProfileRepository:
    return UserProfileRepository(store)
