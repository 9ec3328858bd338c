"""
Custom exceptions for the School Occurrence Reports system.
"""


class AuthorizationError(Exception):
    """Raised when a user attempts an unauthorized action."""

    def __init__(self, message: str, user_id: int = None, action: str = None):
        self.message = message
        self.user_id = user_id
        self.action = action
        super().__init__(self.message)


class NotAuthenticatedError(AuthorizationError):
    """Raised when no signed-in user is attached to the request."""

    def __init__(self):
        super().__init__("Not authenticated", action="authenticate")


class AdminOnlyError(AuthorizationError):
    """Raised when a non-admin tries to perform an admin-only action."""

    def __init__(self, user_id: int, action: str):
        message = f"Access denied: only administrators can perform '{action}'"
        super().__init__(message, user_id=user_id, action=action)


class NotFoundError(Exception):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        self.message = f"{entity} with id {entity_id} not found"
        super().__init__(self.message)


class DuplicateError(Exception):
    """Raised when a unique field already holds the given value."""

    def __init__(self, entity: str, field: str, value):
        self.entity = entity
        self.field = field
        self.value = value
        self.message = f"{entity} with {field} '{value}' already exists"
        super().__init__(self.message)



class ValidationError(Exception):
    """Raised when a request is well-formed but cannot be applied."""

    def __init__(self, message: str, field: str = None):
        self.message = message
        self.field = field
        super().__init__(self.message)
