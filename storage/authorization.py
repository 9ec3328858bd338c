"""
Authorization module for the School Occurrence Reports system.
Implements the three access levels used by the API.

RULES:
1. Never trust the client for the admin flag - always read it from the DB
2. Any signed-in user can read data, submit reports and edit students
3. Only admins can create classes, bulk-import students and manage users
"""
import logging
import secrets
from typing import Optional
from sqlalchemy.orm import Session

from database import LoginSession, User
from .exceptions import AdminOnlyError, NotAuthenticatedError
from .security import verify_password

logger = logging.getLogger(__name__)


class AuthorizationService:
    """
    Service for handling authentication and authorization checks.
    All role information is fetched from the database, never trusted from client.
    """

    def __init__(self, db: Session):
        self.db = db

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """
        Check a username/password pair.

        Returns:
            The matching User, or None when the user is unknown or the
            password does not match
        """
        user = self.db.query(User).filter(User.username == username).first()
        if not user or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt for username '%s'", username)
            return None
        return user

    def start_session(self, user: User) -> str:
        """Open a server-side session for the user and return its token."""
        token = secrets.token_urlsafe(32)
        self.db.add(LoginSession(token=token, user_id=user.id))
        self.db.commit()
        return token

    def end_session(self, token: Optional[str]) -> None:
        """Revoke a session. Unknown or missing tokens are ignored."""
        if not token:
            return
        self.db.query(LoginSession).filter(LoginSession.token == token).delete(
            synchronize_session="fetch"
        )
        self.db.commit()

    def get_session_user(self, token: Optional[str]) -> User:
        """
        Resolve the user behind a session token.

        Raises:
            NotAuthenticatedError: If there is no token, the session was
                revoked or the user no longer exists
        """
        if not token:
            raise NotAuthenticatedError()
        login_session = self.db.get(LoginSession, token)
        if not login_session or not login_session.user:
            raise NotAuthenticatedError()
        return login_session.user

    def is_admin(self, user: User) -> bool:
        """Check if user is an administrator."""
        return bool(user.is_admin)

    def enforce_admin_only(self, user: User, action: str) -> None:
        """
        Enforce that only admins can perform an action.

        Args:
            user: The requesting user
            action: Description of the action being attempted

        Raises:
            AdminOnlyError: If user is not an admin
        """
        if not self.is_admin(user):
            raise AdminOnlyError(user.id, action)


def get_authorization_service(db: Session) -> AuthorizationService:
    """Factory function to create AuthorizationService."""
    return AuthorizationService(db)
