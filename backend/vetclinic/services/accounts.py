"""Account registration: login identity plus its owner profile, atomically."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from vetclinic.core.errors import BadRequestError, RegistrationFailedError
from vetclinic.core.identity import create_identity, find_by_username
from vetclinic.db.models.owner import Owner
from vetclinic.db.models.user import ROLE_STANDARD, User

logger = logging.getLogger(__name__)


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def register_owner_account(
    db: Session,
    *,
    username: str,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone_number: str | None = None,
) -> tuple[User, Owner]:
    """Create the identity and its owner profile in one transaction.

    If the profile step fails the identity is rolled back too, so no
    profile-less account is left behind and the username stays free.
    """
    logger.info("Register attempt for username: %s, email: %s", username, email)

    if find_by_username(db, username) is not None:
        raise BadRequestError("User already exists!")

    try:
        user = create_identity(db, username, email, password, (ROLE_STANDARD,))

        owner = Owner(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=_normalize_email(email),
            phone_number=(phone_number or "").strip() or None,
            user_id=user.user_id,
        )
        db.add(owner)
        db.flush()

        db.commit()
    except Exception as exc:
        db.rollback()
        logger.exception("Registration failed for %s. Transaction rolled back.", username)
        raise RegistrationFailedError() from exc

    return user, owner
