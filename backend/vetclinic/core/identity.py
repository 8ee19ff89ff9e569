"""Caller identity resolution.

Maps an authenticated login identity to the clinic-level view used by
every authorization decision: either an administrator, or a standard
caller narrowed to exactly one Owner profile (or to nothing at all when
the profile has not been created yet).

Also hosts the small credential collaborator used by the auth routes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from vetclinic.core.security import hash_password, verify_password
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.user import ROLE_ADMIN, ROLE_STANDARD, User, UserRole


@dataclass(frozen=True)
class Caller:
    username: str
    roles: tuple[str, ...]
    is_administrator: bool
    owner_id: uuid.UUID | None = None

    @property
    def has_owner_profile(self) -> bool:
        return self.owner_id is not None


def resolve_caller(db: Session, identity: User) -> Caller:
    """Build the Caller for one request.

    Must run per request: roles and the owner link can change between
    requests (e.g. an owner profile created after login).
    """
    roles = tuple(roles_of(identity))
    owner_id = db.execute(
        select(Owner.owner_id).where(Owner.user_id == identity.user_id)
    ).scalar_one_or_none()

    # For administrators a linked profile, if any, plays no part in authorization.
    return Caller(
        username=identity.username,
        roles=roles,
        is_administrator=ROLE_ADMIN in roles,
        owner_id=owner_id,
    )


# -------------------------
# Credential collaborator
# -------------------------
def find_by_username(db: Session, username: str) -> User | None:
    return db.execute(
        select(User).where(func.lower(User.username) == username.strip().lower())
    ).scalar_one_or_none()


def check_password(identity: User, password: str) -> bool:
    return verify_password(password, identity.password)


def roles_of(identity: User) -> list[str]:
    return sorted(r.role for r in identity.roles)


def create_identity(
    db: Session,
    username: str,
    email: str,
    password: str,
    roles: tuple[str, ...] = (ROLE_STANDARD,),
) -> User:
    """Add a login identity with its roles. Flushes; the caller owns the commit."""
    user = User(
        username=username.strip(),
        email=email.strip().lower(),
        password=hash_password(password),
    )
    user.roles = [UserRole(role=role) for role in roles]
    db.add(user)
    db.flush()
    return user
