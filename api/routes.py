"""
API routes for the School Occurrence Reports system.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from config.settings import Settings
from database import (
    User,
    InsertUser,
    InsertClass,
    InsertStudent,
    InsertReport,
    UserRecord,
    ClassRecord,
    StudentRecord,
    StudentWithReportCount,
    ReportRecord,
    ClassWithStudents,
)
from storage import (
    AuthorizationService,
    DatabaseStorage,
    NotFoundError,
    ValidationError,
    ensure_admin_user,
    reconcile_classes,
)
from .dependencies import (
    SESSION_TOKEN_KEY,
    get_app_settings,
    get_auth_service,
    get_current_user,
    get_storage,
    require_admin,
)
from .schemas import (
    LoginRequest,
    RegisterRequest,
    BulkStudentsRequest,
    ReportCreateRequest,
    MessageResponse,
    SetupResponse,
)

logger = logging.getLogger(__name__)


# Router for session and account endpoints
auth_router = APIRouter(prefix="/api", tags=["Auth"])

# Router for classes
classes_router = APIRouter(prefix="/api/classes", tags=["Classes"])

# Router for students
students_router = APIRouter(prefix="/api/students", tags=["Students"])

# Router for reports
reports_router = APIRouter(prefix="/api/reports", tags=["Reports"])

# Router for the dashboard and admin listings
dashboard_router = APIRouter(prefix="/api", tags=["Dashboard"])


# ============== Auth Endpoints ==============

@auth_router.post("/login", response_model=UserRecord)
async def login(
    payload: LoginRequest,
    request: Request,
    auth: AuthorizationService = Depends(get_auth_service),
):
    """Check credentials and start a session."""
    user = auth.authenticate(payload.username, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    auth.end_session(request.session.get(SESSION_TOKEN_KEY))
    request.session.clear()
    request.session[SESSION_TOKEN_KEY] = auth.start_session(user)
    return user


@auth_router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    auth: AuthorizationService = Depends(get_auth_service),
):
    """Revoke the current session (no-op when there is none)."""
    auth.end_session(request.session.get(SESSION_TOKEN_KEY))
    request.session.clear()
    return MessageResponse(message="Logged out")


@auth_router.get("/user", response_model=UserRecord)
async def current_user_info(current_user: User = Depends(get_current_user)):
    """Return the signed-in user."""
    return current_user


@auth_router.post("/register", response_model=UserRecord, status_code=201)
async def register_user(
    payload: RegisterRequest,
    storage: DatabaseStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
    _: User = Depends(require_admin),
):
    """Create a user (admin only). Omitting the password uses the configured default."""
    return storage.create_user(
        InsertUser(
            username=payload.username,
            password=payload.password or settings.default_user_password,
            is_admin=payload.is_admin,
        )
    )


@auth_router.get("/setup", response_model=SetupResponse)
async def setup(
    storage: DatabaseStorage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    """
    Diagnostic endpoint - run the bootstrap reconciliation on demand.

    Idempotent: once the database is set up, calling it changes nothing
    and just reports the current counts.
    """
    admin_created = ensure_admin_user(storage, settings.admin_username, settings.admin_password)
    result = reconcile_classes(storage, settings.required_classes, settings.legacy_classes)
    return SetupResponse(
        status="ok",
        classes=len(storage.get_classes()),
        users=len(storage.list_users()),
        created_classes=result.created_classes,
        removed_classes=result.removed_classes,
        admin_created=admin_created,
    )


# ============== Class Endpoints ==============

@classes_router.get("", response_model=List[ClassRecord])
async def list_classes(
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """Return all classes sorted by name."""
    return storage.get_classes()


@classes_router.get("/{class_id}", response_model=ClassWithStudents)
async def get_class(
    class_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """Return one class with its students and their reports."""
    class_data = storage.get_class_with_students(class_id)
    if class_data is None:
        raise NotFoundError("Class", class_id)
    return class_data


@classes_router.post("", response_model=ClassRecord, status_code=201)
async def create_class(
    payload: InsertClass,
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(require_admin),
):
    """Create a class (admin only). Duplicate names are rejected."""
    return storage.create_class(payload)


# ============== Student Endpoints ==============

@students_router.get("", response_model=List[StudentWithReportCount])
async def list_students(
    class_id: Optional[int] = Query(None, alias="classId"),
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """List students, optionally of one class, with their report counts."""
    return storage.get_student_report_counts(class_id)


@students_router.post("", response_model=StudentRecord, status_code=201)
async def create_student(
    payload: InsertStudent,
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """Add a single student to an existing class."""
    if not storage.get_class(payload.class_id):
        raise ValidationError("Class not found", field="classId")
    return storage.create_student(payload)


@students_router.post("/bulk", response_model=List[StudentRecord], status_code=201)
async def bulk_create_students(
    payload: BulkStudentsRequest,
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(require_admin),
):
    """
    Import many students into one class (admin only).

    Names are trimmed and blank entries dropped before inserting.
    """
    names = [name.strip() for name in payload.names if name and name.strip()]
    if not names:
        raise ValidationError("No student names to import", field="names")

    if not storage.get_class(payload.class_id):
        raise ValidationError("Class not found", field="classId")

    students = storage.create_many_students(
        [InsertStudent(name=name, class_id=payload.class_id) for name in names]
    )
    logger.info("Imported %d students into class %s", len(students), payload.class_id)
    return students


@students_router.api_route("/{student_id}", methods=["PATCH", "PUT"], response_model=StudentRecord)
async def update_student(
    student_id: int,
    payload: InsertStudent,
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """Replace a student's name and class."""
    if not storage.get_student(student_id):
        raise NotFoundError("Student", student_id)

    if not storage.get_class(payload.class_id):
        raise ValidationError("Class not found", field="classId")

    return storage.update_student(student_id, payload)


@students_router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(
    student_id: int,
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """Delete a student and all of its reports."""
    storage.delete_student(student_id)
    return MessageResponse(message="Student deleted")


# ============== Report Endpoints ==============

@reports_router.get("", response_model=List[ReportRecord])
async def list_reports(
    student_id: Optional[int] = Query(None, alias="studentId"),
    class_id: Optional[int] = Query(None, alias="classId"),
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """
    List reports.

    `studentId` takes precedence over `classId`; without either, every
    report is returned.
    """
    if student_id is not None:
        return storage.get_reports_by_student(student_id)
    if class_id is not None:
        return storage.get_reports_by_class(class_id)
    return storage.get_reports()


@reports_router.post("", response_model=ReportRecord, status_code=201)
async def create_report(
    payload: ReportCreateRequest,
    storage: DatabaseStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Submit an occurrence report for an existing student."""
    if not storage.get_student(payload.student_id):
        raise ValidationError("Student not found", field="studentId")

    return storage.create_report(
        InsertReport(
            student_id=payload.student_id,
            content=payload.content,
            date=payload.date,
            reporter_type=payload.reporter_type,
            created_by=current_user.id,
        )
    )


# ============== Dashboard Endpoints ==============

@dashboard_router.get("/dashboard", response_model=List[ClassWithStudents])
async def dashboard(
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(get_current_user),
):
    """Every class with its students and their reports."""
    return storage.get_classes_with_students()


@dashboard_router.get("/users", response_model=List[UserRecord])
async def list_users(
    storage: DatabaseStorage = Depends(get_storage),
    _: User = Depends(require_admin),
):
    """List users without their password hashes (admin only)."""
    return storage.list_users()
