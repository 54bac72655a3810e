"""Queries over assignments and the submissions made against them.

Functions take the request-scoped ``Session`` as their last argument and let
``SQLAlchemyError`` propagate; the routes decide how a failure is reported.
"""

from datetime import datetime

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, contains_eager, joinedload

from backend.database import utc_now
from backend.models.assignment import Assignment
from backend.models.submission import Submission

_UPSERT_INSERTS = {
    'sqlite': sqlite.insert,
    'postgresql': postgresql.insert,
}


def create_assignment(title: str, description: str, due_date: datetime, teacher_id: int, db: Session) -> int:
    assignment = Assignment(
        title=title,
        description=description,
        due_date=due_date,
        teacher_id=teacher_id,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment.id


def list_assignments_for_teacher(teacher_id: int, db: Session) -> list[Assignment]:
    return (
        db.query(Assignment)
        .options(joinedload(Assignment.teacher))
        .filter(Assignment.teacher_id == teacher_id)
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .all()
    )


def list_all_assignments(db: Session) -> list[Assignment]:
    return (
        db.query(Assignment)
        .join(Assignment.teacher)
        .options(contains_eager(Assignment.teacher))
        .order_by(Assignment.created_at.desc(), Assignment.id.desc())
        .all()
    )


def get_assignment(assignment_id: int, db: Session) -> Assignment | None:
    return (
        db.query(Assignment)
        .join(Assignment.teacher)
        .options(contains_eager(Assignment.teacher))
        .filter(Assignment.id == assignment_id)
        .first()
    )


def upsert_submission(
    assignment_id: int,
    student_id: int,
    content: str,
    file_path: str | None,
    db: Session,
) -> int:
    """Insert the student's submission or replace the one already stored.

    A replacement keeps the row id, overwrites content, file and timestamp,
    and clears any grade or feedback left from the previous submission.
    """
    dialect_name = db.get_bind().dialect.name
    insert = _UPSERT_INSERTS.get(dialect_name)
    if insert is None:
        raise NotImplementedError(f'Submission upsert is not supported on {dialect_name}.')

    statement = insert(Submission).values(
        assignment_id=assignment_id,
        student_id=student_id,
        content=content,
        file_path=file_path,
        submitted_at=utc_now(),
        grade=None,
        feedback=None,
    )
    statement = statement.on_conflict_do_update(
        index_elements=['assignment_id', 'student_id'],
        set_={
            'content': statement.excluded.content,
            'file_path': statement.excluded.file_path,
            'submitted_at': statement.excluded.submitted_at,
            'grade': None,
            'feedback': None,
        },
    ).returning(Submission.id)

    submission_id = db.execute(statement).scalar_one()
    db.commit()
    return submission_id


def list_submissions(assignment_id: int, db: Session) -> list[Submission]:
    return (
        db.query(Submission)
        .join(Submission.student)
        .options(contains_eager(Submission.student))
        .filter(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )


def get_student_submission(assignment_id: int, student_id: int, db: Session) -> Submission | None:
    return db.query(Submission).filter(
        Submission.assignment_id == assignment_id,
        Submission.student_id == student_id,
    ).first()
