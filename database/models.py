"""
Database models for the School Occurrence Reports system.
Defines the SQLAlchemy models for users, classes, students and reports.
"""
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ReporterType(str, PyEnum):
    """Who submitted an occurrence report."""
    LIDER = "Líder"
    VICE = "Vice"
    PROFESSOR = "Professor"


class User(Base):
    """
    Users table - staff accounts allowed to sign in.

    Attributes:
        id: Unique identifier
        username: Login name (unique)
        password_hash: Salted password hash, never the plaintext
        is_admin: Whether the user can manage classes, students and users
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(150), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)

    reports = relationship("Report", back_populates="author")

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', is_admin={self.is_admin})>"


class SchoolClass(Base):
    """
    Classes table (grade + section, e.g. "6A").

    Attributes:
        id: Unique identifier
        name: Class name, unique
    """
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False, unique=True)

    students = relationship("Student", back_populates="school_class")

    def __repr__(self):
        return f"<SchoolClass(id={self.id}, name='{self.name}')>"


class Student(Base):
    """
    Students table.

    There is no database-level cascade: reports are removed by the
    storage layer before the student row.
    """
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)

    school_class = relationship("SchoolClass", back_populates="students")
    reports = relationship("Report", back_populates="student")

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', class_id={self.class_id})>"


class Report(Base):
    """
    Occurrence reports. Immutable once created.

    Attributes:
        id: Unique identifier
        student_id: Student the occurrence is about
        content: Free-text description of what happened
        date: When it happened
        reporter_type: One of "Líder", "Vice", "Professor"
        created_by: User who submitted the report
    """
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, ForeignKey("students.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    date = Column(DateTime, nullable=False, default=func.now())
    reporter_type = Column(String(20), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    student = relationship("Student", back_populates="reports")
    author = relationship("User", back_populates="reports")

    def __repr__(self):
        return f"<Report(id={self.id}, student_id={self.student_id}, reporter_type='{self.reporter_type}')>"


class LoginSession(Base):
    """
    Server-side sessions. The session cookie only carries the token, so
    deleting the row signs the user out everywhere the cookie was copied.

    Attributes:
        token: Random opaque identifier stored in the signed cookie
        user_id: Signed-in user
        created_at: Login time
    """
    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    user = relationship("User")

    def __repr__(self):
        return f"<LoginSession(user_id={self.user_id}, created_at={self.created_at})>"
