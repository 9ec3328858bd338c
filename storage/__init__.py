"""
Storage module for the School Occurrence Reports system.

This module provides the repository over the database plus the
authorization, password hashing and bootstrap helpers used by the API.
"""
from .exceptions import (
    AuthorizationError,
    NotAuthenticatedError,
    AdminOnlyError,
    NotFoundError,
    DuplicateError,
    ValidationError,
)

from .authorization import (
    AuthorizationService,
    get_authorization_service,
)

from .security import (
    hash_password,
    verify_password,
)

from .repository import (
    DatabaseStorage,
    collation_key,
)

from .bootstrap import (
    BootstrapResult,
    ensure_admin_user,
    reconcile_classes,
    run_bootstrap,
)

__all__ = [
    # Exceptions
    "AuthorizationError",
    "NotAuthenticatedError",
    "AdminOnlyError",
    "NotFoundError",
    "DuplicateError",
    "ValidationError",
    # Authorization
    "AuthorizationService",
    "get_authorization_service",
    # Security
    "hash_password",
    "verify_password",
    # Repository
    "DatabaseStorage",
    "collation_key",
    # Bootstrap
    "BootstrapResult",
    "ensure_admin_user",
    "reconcile_classes",
    "run_bootstrap",
]
