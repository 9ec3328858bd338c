"""
FastAPI dependencies: storage injection and the access-level guards.

The guards raise the domain errors from ``storage.exceptions``; the
application's exception handlers turn them into 401/403 responses.
"""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from config import Settings
from database import get_db, User
from storage import AuthorizationService, DatabaseStorage

SESSION_TOKEN_KEY = "session_token"


def get_storage(db: Session = Depends(get_db)) -> DatabaseStorage:
    """Repository bound to the request's database session."""
    return DatabaseStorage(db)


def get_auth_service(db: Session = Depends(get_db)) -> AuthorizationService:
    return AuthorizationService(db)


def get_current_user(
    request: Request,
    auth: AuthorizationService = Depends(get_auth_service),
) -> User:
    """Signed-in user behind the session cookie's token."""
    return auth.get_session_user(request.session.get(SESSION_TOKEN_KEY))


def require_admin(
    request: Request,
    current_user: User = Depends(get_current_user),
    auth: AuthorizationService = Depends(get_auth_service),
) -> User:
    """Signed-in administrator; any other signed-in user is refused."""
    auth.enforce_admin_only(current_user, f"{request.method} {request.url.path}")
    return current_user


def get_app_settings(request: Request) -> Settings:
    """Settings the running application was created with."""
    return request.app.state.settings
