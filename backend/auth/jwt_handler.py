from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from backend.core import config

IDENTITY_CLAIMS = ("id", "email", "role", "name")


class InvalidTokenError(Exception):
    """Raised for any token that fails signature, expiry or shape checks."""


@dataclass(frozen=True)
class TokenIdentity:
    id: int
    email: str
    role: str
    name: str


class TokenService:
    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_minutes: int = 7 * 24 * 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, identity, expires_minutes: int | None = None) -> str:
        expire_minutes = expires_minutes or self.expires_minutes
        now = datetime.now(timezone.utc)
        payload = {
            "id": identity.id,
            "email": identity.email,
            "role": identity.role,
            "name": identity.name,
            "iat": now,
            "exp": now + timedelta(minutes=expire_minutes),
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenIdentity:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", *IDENTITY_CLAIMS]},
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(str(exc)) from exc

        if not isinstance(payload["id"], int):
            raise InvalidTokenError("Token subject id must be an integer")
        return TokenIdentity(**{claim: payload[claim] for claim in IDENTITY_CLAIMS})


token_service = TokenService(
    secret_key=config.JWT_SECRET_KEY,
    algorithm=config.JWT_ALGORITHM,
    expires_minutes=config.JWT_EXPIRES_MINUTES,
)


def get_token_service() -> TokenService:
    return token_service
