from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.models.user import User


class DuplicateEmailError(Exception):
    """Raised when signing up with an email that is already registered."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(email: str, db: Session) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user_by_id(user_id: int, db: Session) -> User | None:
    return db.get(User, user_id)


def create_user(email: str, password_hash: str, role: str, name: str, db: Session) -> int:
    normalized_email = normalize_email(email)
    if get_user_by_email(normalized_email, db) is not None:
        raise DuplicateEmailError(normalized_email)

    user = User(email=normalized_email, password_hash=password_hash, role=role, name=name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # Lost a race with a concurrent signup for the same email.
        if get_user_by_email(normalized_email, db) is not None:
            raise DuplicateEmailError(normalized_email) from exc
        raise
    db.refresh(user)
    return user.id
