import logging

from fastapi import Depends, Header, HTTPException, status
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session

from backend.auth.jwt_handler import InvalidTokenError, TokenService, get_token_service
from backend.database import get_db
from backend.models.user import User
from backend.repositories import users

logger = logging.getLogger(__name__)


def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    # Any "<scheme> <credential>" pair counts as a presented token; a wrong
    # scheme fails verification rather than reading as a missing header.
    _scheme, credential = get_authorization_scheme_param(authorization)
    return credential or None


def get_current_user(
    token: str | None = Depends(get_bearer_token),
    tokens: TokenService = Depends(get_token_service),
    db: Session = Depends(get_db),
) -> User:
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")

    try:
        identity = tokens.verify(token)
    except InvalidTokenError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        ) from exc

    # The token only proves who authenticated; role and name come from the store.
    user = users.get_user_by_id(identity.id, db)
    if user is None:
        logger.warning("Token for unknown user id %s", identity.id)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user


def require_role(role: str):
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"{role} role required")
        return current_user

    return role_checker
