"""
Pydantic schemas for API requests and responses.
"""
from datetime import datetime
from typing import Annotated, Optional, List
from pydantic import Field, StringConstraints

from database.models import ReporterType
from database.schemas import CamelModel


# Same upper bound as the students.name column
StudentName = Annotated[str, StringConstraints(max_length=255)]


# Request schemas
class LoginRequest(CamelModel):
    """Credentials for session login."""
    username: str = Field(..., min_length=1, description="Login name")
    password: str = Field(..., min_length=1, description="Plain password, checked against the stored hash")


class RegisterRequest(CamelModel):
    """Request to create a user (admin only)."""
    username: str = Field(..., min_length=3, max_length=150, description="Login name")
    password: Optional[str] = Field(None, min_length=4, description="Initial password; defaults to the configured one")
    is_admin: bool = Field(default=False, description="Grant administrator rights")


class BulkStudentsRequest(CamelModel):
    """Request to import many students into one class."""
    class_id: int = Field(..., description="Target class ID")
    names: List[StudentName] = Field(..., min_length=1, description="Student names, one per entry")


class ReportCreateRequest(CamelModel):
    """Request to submit an occurrence report. The author is the session user."""
    student_id: int = Field(..., description="ID of the student")
    content: str = Field(..., min_length=1, description="What happened")
    date: Optional[datetime] = Field(None, description="When it happened; defaults to now")
    reporter_type: ReporterType = Field(..., description="Líder, Vice or Professor")


# Response schemas
class MessageResponse(CamelModel):
    """Generic confirmation."""
    message: str


class SetupResponse(CamelModel):
    """Diagnostic output of the setup endpoint."""
    status: str
    classes: int
    users: int
    created_classes: List[str]
    removed_classes: List[str]
    admin_created: bool
