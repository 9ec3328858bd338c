"""Database module."""
from .models import Base, User, SchoolClass, Student, Report, ReporterType, LoginSession
from .connection import (
    engine,
    SessionLocal,
    build_engine,
    make_session_factory,
    get_db,
    get_db_context,
    init_db,
)
from .schemas import (
    InsertUser,
    InsertClass,
    InsertStudent,
    InsertReport,
    UserRecord,
    ClassRecord,
    StudentRecord,
    ReportRecord,
    StudentWithReportCount,
    StudentWithReports,
    ClassWithStudents,
)

__all__ = [
    "Base",
    "User",
    "SchoolClass",
    "Student",
    "Report",
    "ReporterType",
    "LoginSession",
    "engine",
    "SessionLocal",
    "build_engine",
    "make_session_factory",
    "get_db",
    "get_db_context",
    "init_db",
    "InsertUser",
    "InsertClass",
    "InsertStudent",
    "InsertReport",
    "UserRecord",
    "ClassRecord",
    "StudentRecord",
    "ReportRecord",
    "StudentWithReportCount",
    "StudentWithReports",
    "ClassWithStudents",
]
