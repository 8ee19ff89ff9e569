"""Module: deps."""

from typing import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from vetclinic.core.errors import AuthenticationError, PermissionDeniedError
from vetclinic.core.identity import Caller, resolve_caller
from vetclinic.core.security import resolve_token
from vetclinic.db.models.user import User
from vetclinic.db.session import SessionLocal

# Dependency provider: one DB session per request lifecycle.
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token_value(authorization: str | None) -> str:
    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Invalid Authorization header")

    return parts[1].strip()


# Re-resolved on every request; role and owner-link state is never cached.
def get_caller(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> Caller:
    user_id = resolve_token(get_token_value(authorization))
    user = db.get(User, user_id)
    if not user:
        raise AuthenticationError("User not found")
    return resolve_caller(db, user)


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_administrator:
        raise PermissionDeniedError("Administrator role required")
    return caller
