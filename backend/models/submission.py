"""Submission model definitions."""

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from backend.database import Base, utc_now


class Submission(Base):
    """A student's response to an assignment, one per student and assignment."""
    __tablename__ = "submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
        CheckConstraint("grade >= 0 AND grade <= 100", name="ck_submissions_grade_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    content = Column(Text, nullable=False)
    file_path = Column(String, nullable=True)
    submitted_at = Column(DateTime, default=utc_now, nullable=False)
    grade = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)

    student = relationship("User")

    @property
    def student_name(self) -> str | None:
        return self.student.name if self.student is not None else None

    @property
    def student_email(self) -> str | None:
        return self.student.email if self.student is not None else None
