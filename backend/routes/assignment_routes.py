import logging
import os
import secrets
import shutil
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.auth.dependencies import get_current_user, require_role
from backend.core import config
from backend.database import get_db
from backend.models.user import STUDENT_ROLE, TEACHER_ROLE, User
from backend.repositories import assignments

router = APIRouter(tags=['assignments'])

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = 'Internal server error'
UPLOAD_FIELD_NAME = 'file'


class CreateAssignmentRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    dueDate: datetime | None = None

    @field_validator('dueDate', mode='before')
    @classmethod
    def blank_due_date_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator('dueDate')
    @classmethod
    def due_date_as_naive_utc(cls, value: datetime | None) -> datetime | None:
        # Stored columns are naive UTC, like utc_now().
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode='after')
    def validate_fields(self) -> 'CreateAssignmentRequest':
        if not self.title or not self.description or self.dueDate is None:
            raise ValueError('Title, description, and due date are required')
        return self


class AssignmentResponse(BaseModel):
    id: int
    title: str
    description: str
    due_date: datetime
    teacher_id: int
    teacher_name: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class SubmissionResponse(BaseModel):
    id: int
    assignment_id: int
    student_id: int
    content: str
    file_path: str | None = None
    submitted_at: datetime
    grade: int | None = None
    feedback: str | None = None

    class Config:
        from_attributes = True


class StudentSubmissionResponse(SubmissionResponse):
    student_name: str
    student_email: str


class SubmitAssignmentResponse(BaseModel):
    id: int
    message: str


def internal_error(exc: SQLAlchemyError, db: Session, action: str) -> HTTPException:
    db.rollback()
    logger.error('%s failed', action, exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=INTERNAL_ERROR_DETAIL,
    )


def build_upload_filename(original_filename: str) -> str:
    extension = os.path.splitext(os.path.basename(original_filename))[1]
    unique_suffix = f'{int(time.time() * 1000)}-{secrets.randbelow(10**9)}'
    return f'{UPLOAD_FIELD_NAME}-{unique_suffix}{extension}'


def save_upload(upload: UploadFile, upload_dir: str | None = None) -> str:
    """Write the upload to disk and return its path under the uploads mount."""
    target_dir = upload_dir or config.UPLOAD_DIR
    os.makedirs(target_dir, exist_ok=True)
    filename = build_upload_filename(upload.filename)

    with open(os.path.join(target_dir, filename), 'wb') as out:
        shutil.copyfileobj(upload.file, out)

    return f'{config.UPLOADS_URL_PATH}/{filename}'


@router.post('/assignments', response_model=AssignmentResponse, status_code=status.HTTP_201_CREATED)
def create_assignment(
    data: CreateAssignmentRequest,
    current_user: User = Depends(require_role(TEACHER_ROLE)),
    db: Session = Depends(get_db),
):
    try:
        assignment_id = assignments.create_assignment(
            data.title,
            data.description,
            data.dueDate,
            current_user.id,
            db,
        )
        assignment = assignments.get_assignment(assignment_id, db)
    except SQLAlchemyError as exc:
        raise internal_error(exc, db, 'Create assignment') from exc

    logger.info('Teacher %s created assignment %s', current_user.id, assignment_id)
    return assignment


@router.get('/assignments', response_model=list[AssignmentResponse])
def list_assignments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        if current_user.role == TEACHER_ROLE:
            return assignments.list_assignments_for_teacher(current_user.id, db)
        return assignments.list_all_assignments(db)
    except SQLAlchemyError as exc:
        raise internal_error(exc, db, 'List assignments') from exc


@router.get(
    '/assignments/{assignment_id}',
    response_model=AssignmentResponse,
    dependencies=[Depends(get_current_user)],
)
def get_assignment(assignment_id: int, db: Session = Depends(get_db)):
    try:
        assignment = assignments.get_assignment(assignment_id, db)
    except SQLAlchemyError as exc:
        raise internal_error(exc, db, 'Get assignment') from exc

    if assignment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Assignment not found')
    return assignment


@router.post(
    '/assignments/{assignment_id}/submit',
    response_model=SubmitAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def submit_assignment(
    assignment_id: int,
    content: str | None = Form(None),
    file: UploadFile | None = File(None),
    current_user: User = Depends(require_role(STUDENT_ROLE)),
    db: Session = Depends(get_db),
):
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Submission content is required')

    try:
        assignment = assignments.get_assignment(assignment_id, db)
    except SQLAlchemyError as exc:
        raise internal_error(exc, db, 'Submit assignment') from exc

    if assignment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Assignment not found')

    # Browsers send an empty part with no filename when nothing was chosen.
    file_path = save_upload(file) if file is not None and file.filename else None

    try:
        submission_id = assignments.upsert_submission(assignment_id, current_user.id, content, file_path, db)
    except SQLAlchemyError as exc:
        raise internal_error(exc, db, 'Submit assignment') from exc

    logger.info('Student %s submitted assignment %s', current_user.id, assignment_id)
    return SubmitAssignmentResponse(id=submission_id, message='Assignment submitted successfully')


@router.get('/assignments/{assignment_id}/submissions', response_model=list[StudentSubmissionResponse])
def list_assignment_submissions(
    assignment_id: int,
    current_user: User = Depends(require_role(TEACHER_ROLE)),
    db: Session = Depends(get_db),
):
    try:
        assignment = assignments.get_assignment(assignment_id, db)
        if assignment is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Assignment not found')

        if assignment.teacher_id != current_user.id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='You can only view submissions for your assignments',
            )

        return assignments.list_submissions(assignment_id, db)
    except SQLAlchemyError as exc:
        raise internal_error(exc, db, 'List submissions') from exc


@router.get('/assignments/{assignment_id}/my-submission', response_model=SubmissionResponse)
def get_my_submission(
    assignment_id: int,
    current_user: User = Depends(require_role(STUDENT_ROLE)),
    db: Session = Depends(get_db),
):
    try:
        submission = assignments.get_student_submission(assignment_id, current_user.id, db)
    except SQLAlchemyError as exc:
        raise internal_error(exc, db, 'Get student submission') from exc

    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='No submission found')
    return submission
