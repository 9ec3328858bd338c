"""API module for the School Occurrence Reports system."""
from .routes import (
    auth_router,
    classes_router,
    students_router,
    reports_router,
    dashboard_router,
)
from .dependencies import get_storage, get_current_user, require_admin
from .schemas import (
    LoginRequest,
    RegisterRequest,
    BulkStudentsRequest,
    ReportCreateRequest,
    MessageResponse,
    SetupResponse,
)

routers = [
    auth_router,
    classes_router,
    students_router,
    reports_router,
    dashboard_router,
]

__all__ = [
    "routers",
    "auth_router",
    "classes_router",
    "students_router",
    "reports_router",
    "dashboard_router",
    "get_storage",
    "get_current_user",
    "require_admin",
    "LoginRequest",
    "RegisterRequest",
    "BulkStudentsRequest",
    "ReportCreateRequest",
    "MessageResponse",
    "SetupResponse",
]
