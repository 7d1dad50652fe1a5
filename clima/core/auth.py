# clima/core/auth.py
from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from clima.core.config import get_settings
from clima.core.email_client import build_mailer
from clima.core.errors import AuthError
from clima.database import get_session
from clima.models.user import User
from clima.repositories.user_repo import UserRepository
from clima.services.auth_service import AuthConfig, AuthService

# HTTP Bearer scheme:
# - auto_error=False => a missing Authorization header does not raise here,
#   so the 401 body keeps the usual {"message": ...} shape.
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_auth_service() -> AuthService:
    """
    Build the AuthService once per process from settings.

    Tests replace this dependency via `app.dependency_overrides`.
    """
    settings = get_settings()
    config = AuthConfig.from_settings(settings, build_mailer(settings))
    return AuthService(UserRepository(), config)


def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the session token issued at login to its User.

    Raises:
        AuthError(401): header missing, token invalid/expired, or the
            user no longer exists.
    """
    if credentials is None:
        raise AuthError("Authentication required.")
    return service.user_from_session_token(session, credentials.credentials)
