"""Sign up, sign in and session routes."""

from fastapi import APIRouter, Depends

from ...auth import AuthSession, Identity, IdentityProvider
from ...db.repositories import UserProfileRepository
from ..dependencies import (
    get_current_identity,
    get_identity_provider,
    get_profile_repo,
    get_token,
)
from ..schemas import SignInBody, SignUpBody

router = APIRouter(prefix="/auth", tags=["auth"])


async def _session_response(session: AuthSession, profiles: UserProfileRepository) -> dict:
    identity = session.identity
    # Every authenticated user gets a profile document
    profile = await profiles.ensure_profile(identity.id, identity.email, identity.display_name)
    return {
        "token": session.token,
        "expiresAt": session.expires_at.isoformat(),
        "user": identity.to_dict(),
        "profile": profile.to_dict(),
    }


@router.post("/signup", status_code=201)
async def sign_up(
    body: SignUpBody,
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Create an account and sign in."""
    session = await identity_provider.sign_up(body.email, body.password, body.display_name)
    return await _session_response(session, profiles)


@router.post("/login")
async def login(
    body: SignInBody,
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    profiles: UserProfileRepository = Depends(get_profile_repo),
):
    """Sign in with email and password."""
    session = await identity_provider.sign_in(body.email, body.password)
    return await _session_response(session, profiles)


@router.post("/logout")
async def logout(
    token: str = Depends(get_token),
    identity: Identity = Depends(get_current_identity),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """Revoke the current token."""
    await identity_provider.sign_out(token)
    return {"status": "signed_out", "userId": identity.id}


@router.get("/me")
async def me(identity: Identity = Depends(get_current_identity)):
    return identity.to_dict()
