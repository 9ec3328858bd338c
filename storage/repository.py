"""
Storage layer for the School Occurrence Reports system.

DatabaseStorage wraps one SQLAlchemy session and exposes the CRUD
operations per entity plus the composite reads that join
classes -> students -> reports into nested views.
"""
import logging
import unicodedata
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import (
    User,
    SchoolClass,
    Student,
    Report,
    InsertUser,
    InsertClass,
    InsertStudent,
    InsertReport,
    ReportRecord,
    StudentWithReportCount,
    StudentWithReports,
    ClassWithStudents,
)
from .exceptions import DuplicateError, NotFoundError
from .security import hash_password

logger = logging.getLogger(__name__)


def collation_key(name: str):
    """
    Sort key approximating locale-aware comparison.

    Accents and case are ignored first ("6a" sorts with "6A"). Ties are
    broken with lowercase before uppercase, as ICU collation does.
    """
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), name.swapcase())


class DatabaseStorage:
    """Repository over the users, classes, students and reports tables."""

    def __init__(self, db: Session):
        self.db = db

    # ============== Users ==============

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def list_users(self) -> List[User]:
        return self.db.query(User).order_by(User.id).all()

    def create_user(self, data: InsertUser) -> User:
        """
        Create a user with a hashed password.

        Raises:
            DuplicateError: If the username is taken
        """
        if self.get_user_by_username(data.username):
            raise DuplicateError("User", "username", data.username)

        user = User(
            username=data.username,
            password_hash=hash_password(data.password),
            is_admin=data.is_admin is True,
        )
        self.db.add(user)
        self._commit_unique("User", "username", data.username)
        self.db.refresh(user)
        return user

    # ============== Classes ==============

    def get_classes(self) -> List[SchoolClass]:
        """All classes sorted by name ("6A" < "6B" < "7A")."""
        classes = self.db.query(SchoolClass).all()
        return sorted(classes, key=lambda c: collation_key(c.name))

    def get_class(self, class_id: int) -> Optional[SchoolClass]:
        return self.db.get(SchoolClass, class_id)

    def get_class_by_name(self, name: str) -> Optional[SchoolClass]:
        return self.db.query(SchoolClass).filter(SchoolClass.name == name).first()

    def create_class(self, data: InsertClass) -> SchoolClass:
        """
        Create a class.

        Raises:
            DuplicateError: If a class with the same name exists
        """
        if self.get_class_by_name(data.name):
            raise DuplicateError("Class", "name", data.name)

        school_class = SchoolClass(name=data.name)
        self.db.add(school_class)
        self._commit_unique("Class", "name", data.name)
        self.db.refresh(school_class)
        return school_class

    def delete_class(self, class_id: int) -> None:
        """
        Delete a class together with its students and their reports.

        All three deletes share one transaction.

        Raises:
            NotFoundError: If the class does not exist
        """
        try:
            student_ids = select(Student.id).where(Student.class_id == class_id)
            self.db.query(Report).filter(Report.student_id.in_(student_ids)).delete(
                synchronize_session="fetch"
            )
            self.db.query(Student).filter(Student.class_id == class_id).delete(
                synchronize_session="fetch"
            )
            deleted = self.db.query(SchoolClass).filter(SchoolClass.id == class_id).delete(
                synchronize_session="fetch"
            )
            if deleted == 0:
                raise NotFoundError("Class", class_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    # ============== Students ==============

    def get_students(self) -> List[Student]:
        return self.db.query(Student).order_by(Student.id).all()

    def get_students_by_class(self, class_id: int) -> List[Student]:
        return (
            self.db.query(Student)
            .filter(Student.class_id == class_id)
            .order_by(Student.id)
            .all()
        )

    def get_student(self, student_id: int) -> Optional[Student]:
        return self.db.get(Student, student_id)

    def get_student_report_counts(self, class_id: Optional[int] = None) -> List[StudentWithReportCount]:
        """Students (optionally of one class) with their report counts."""
        query = (
            self.db.query(Student, func.count(Report.id))
            .outerjoin(Report, Report.student_id == Student.id)
            .group_by(Student.id)
            .order_by(Student.id)
        )
        if class_id is not None:
            query = query.filter(Student.class_id == class_id)

        return [
            StudentWithReportCount(
                id=student.id,
                name=student.name,
                class_id=student.class_id,
                report_count=count,
            )
            for student, count in query.all()
        ]

    def create_student(self, data: InsertStudent) -> Student:
        student = Student(name=data.name, class_id=data.class_id)
        self.db.add(student)
        self.db.commit()
        self.db.refresh(student)
        return student

    def create_many_students(self, students: List[InsertStudent]) -> List[Student]:
        """
        Insert several students at once.

        An empty list returns [] without touching the database. The
        result keeps the input order.
        """
        if not students:
            return []

        rows = [Student(name=s.name, class_id=s.class_id) for s in students]
        self.db.add_all(rows)
        self.db.commit()
        for row in rows:
            self.db.refresh(row)
        return rows

    def update_student(self, student_id: int, data: InsertStudent) -> Student:
        """
        Replace a student's name and class.

        Raises:
            NotFoundError: If the student does not exist
        """
        student = self.get_student(student_id)
        if not student:
            raise NotFoundError("Student", student_id)

        student.name = data.name
        student.class_id = data.class_id
        self.db.commit()
        self.db.refresh(student)
        return student

    def delete_student(self, student_id: int) -> None:
        """
        Delete a student after deleting all of its reports.

        Both deletes share one transaction, so a failure leaves the
        student and its reports untouched.

        Raises:
            NotFoundError: If no student row was deleted
        """
        try:
            self.db.query(Report).filter(Report.student_id == student_id).delete(
                synchronize_session="fetch"
            )
            deleted = self.db.query(Student).filter(Student.id == student_id).delete(
                synchronize_session="fetch"
            )
            if deleted == 0:
                raise NotFoundError("Student", student_id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Deleted student %s and its reports", student_id)

    # ============== Reports ==============

    def get_reports(self) -> List[Report]:
        return self.db.query(Report).order_by(Report.id).all()

    def get_reports_by_student(self, student_id: int) -> List[Report]:
        return (
            self.db.query(Report)
            .filter(Report.student_id == student_id)
            .order_by(Report.id)
            .all()
        )

    def get_reports_by_class(self, class_id: int) -> List[Report]:
        """Union of the report sets of every student in the class."""
        students = self.get_students_by_class(class_id)
        if not students:
            return []

        reports_by_student = self._reports_by_student([s.id for s in students])
        reports: List[Report] = []
        for student in students:
            reports.extend(reports_by_student.get(student.id, []))
        return reports

    def create_report(self, data: InsertReport) -> Report:
        report = Report(
            student_id=data.student_id,
            content=data.content,
            date=data.date or datetime.now(),
            reporter_type=data.reporter_type.value,
            created_by=data.created_by,
        )
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)
        return report

    # ============== Composite views ==============

    def get_classes_with_students(self) -> List[ClassWithStudents]:
        """
        Every class (sorted by name) with its students and their reports.

        Students and reports are fetched with one query each and grouped
        in memory; each student still gets its own report list.
        """
        classes = self.get_classes()
        if not classes:
            return []

        students_by_class: Dict[int, List[Student]] = defaultdict(list)
        students = (
            self.db.query(Student)
            .filter(Student.class_id.in_([c.id for c in classes]))
            .order_by(Student.id)
            .all()
        )
        for student in students:
            students_by_class[student.class_id].append(student)

        reports_by_student = self._reports_by_student([s.id for s in students])
        return [
            self._class_view(c, students_by_class.get(c.id, []), reports_by_student)
            for c in classes
        ]

    def get_class_with_students(self, class_id: int) -> Optional[ClassWithStudents]:
        """Same nested shape for one class, or None if it does not exist."""
        school_class = self.get_class(class_id)
        if not school_class:
            return None

        students = self.get_students_by_class(class_id)
        reports_by_student = self._reports_by_student([s.id for s in students])
        return self._class_view(school_class, students, reports_by_student)

    # ============== Helpers ==============

    def _reports_by_student(self, student_ids: List[int]) -> Dict[int, List[Report]]:
        grouped: Dict[int, List[Report]] = defaultdict(list)
        if not student_ids:
            return grouped
        reports = (
            self.db.query(Report)
            .filter(Report.student_id.in_(student_ids))
            .order_by(Report.id)
            .all()
        )
        for report in reports:
            grouped[report.student_id].append(report)
        return grouped

    @staticmethod
    def _class_view(
        school_class: SchoolClass,
        students: List[Student],
        reports_by_student: Dict[int, List[Report]],
    ) -> ClassWithStudents:
        views = []
        for student in students:
            reports = [ReportRecord.model_validate(r) for r in reports_by_student.get(student.id, [])]
            views.append(
                StudentWithReports(
                    id=student.id,
                    name=student.name,
                    class_id=student.class_id,
                    reports=reports,
                    report_count=len(reports),
                )
            )
        return ClassWithStudents(id=school_class.id, name=school_class.name, students=views)

    def _commit_unique(self, entity: str, field: str, value) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise DuplicateError(entity, field, value)
