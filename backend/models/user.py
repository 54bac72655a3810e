"""User model definitions."""

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String
from backend.database import Base, utc_now

STUDENT_ROLE = "student"
TEACHER_ROLE = "teacher"
ROLES = (STUDENT_ROLE, TEACHER_ROLE)


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('student', 'teacher')", name="ck_users_role"),
    )

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)  # student/teacher
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)
