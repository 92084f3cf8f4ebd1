from core.database import SessionLocal
from typing import Annotated
from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from services.credential_store import CredentialStore
from services.refresh_token_store import RefreshTokenStore
from services.revocation_store import RevocationStore
from services.session_manager import SessionManager
from services.token_service import TokenCodec, TokenClaims
from utils.hashing import PasswordVerifier


def build_session_manager(session_factory=SessionLocal) -> SessionManager:
    """Wire the session manager and its stores. Called once at startup."""
    return SessionManager(
        credentials=CredentialStore(session_factory),
        passwords=PasswordVerifier(),
        codec=TokenCodec.from_settings(),
        refresh_tokens=RefreshTokenStore(session_factory),
        revocations=RevocationStore(session_factory),
    )


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager

session_manager_dependency = Annotated[SessionManager, Depends(get_session_manager)]

# auto_error off: a missing header must surface as Unauthenticated, not FastAPI's own 401
oauth2_bearer = OAuth2PasswordBearer(tokenUrl="auth/token", auto_error=False)

bearer_dependency = Annotated[str | None, Depends(oauth2_bearer)]


def get_current_user(request: Request, token: bearer_dependency, manager: session_manager_dependency):
    claims = manager.authenticate(token)

    # Downstream handlers read the decoded claims from request state
    request.state.claims = claims

    return claims


user_dependency = Annotated[TokenClaims, Depends(get_current_user)]
