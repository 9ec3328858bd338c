"""
Pydantic record and insertion schemas shared by the storage and API layers.

Records serialize with camelCase keys (``classId``, ``reportCount``...) and
accept either camelCase or snake_case on input.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import ReporterType


class CamelModel(BaseModel):
    """Base model emitting camelCase JSON."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _strip_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


# Insertion shapes
class InsertUser(CamelModel):
    """Fields required to create a user."""
    username: str = Field(..., min_length=3, max_length=150)
    password: str = Field(..., min_length=4)
    is_admin: bool = False


class InsertClass(CamelModel):
    """Fields required to create a class."""
    name: str = Field(..., min_length=1, max_length=50)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _strip_name(value)


class InsertStudent(CamelModel):
    """Fields required to create or fully replace a student."""
    name: str = Field(..., min_length=1, max_length=255)
    class_id: int

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        return _strip_name(value)


class InsertReport(CamelModel):
    """Fields required to create a report."""
    student_id: int
    content: str = Field(..., min_length=1)
    date: Optional[datetime] = None
    reporter_type: ReporterType
    created_by: Optional[int] = None


# Records
class UserRecord(CamelModel):
    """User as returned by the API - the password hash is never exposed."""
    id: int
    username: str
    is_admin: bool


class ClassRecord(CamelModel):
    id: int
    name: str


class StudentRecord(CamelModel):
    id: int
    name: str
    class_id: int


class ReportRecord(CamelModel):
    id: int
    student_id: int
    content: str
    date: Optional[datetime]
    reporter_type: str
    created_by: Optional[int]


# Composite views
class StudentWithReportCount(StudentRecord):
    """Student with its derived report count (no report bodies)."""
    report_count: int = 0


class StudentWithReports(StudentRecord):
    """Student with its reports attached; report_count is always len(reports)."""
    reports: List[ReportRecord] = Field(default_factory=list)
    report_count: int = 0


class ClassWithStudents(ClassRecord):
    """Class with its students and their reports."""
    students: List[StudentWithReports] = Field(default_factory=list)
