"""Domain exceptions, framework independent.

Each exception carries the HTTP status it maps to; ``vetclinic.main``
registers a single handler that renders them as ``{"detail": message}``.
"""

import logging
import uuid

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class BadRequestError(ClinicError):
    status_code = 400


class InvalidIdentifierError(BadRequestError):
    """A path/body identifier is not a UUID."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Invalid {field_name} (must be UUID)")


class ReferenceNotFoundError(BadRequestError):
    """A referenced Pet/Vet/Owner/Treatment does not exist."""


class OwnershipRejectedError(BadRequestError):
    """A standard caller tried to act on something outside their own records."""


class AuthenticationError(ClinicError):
    status_code = 401


class PermissionDeniedError(ClinicError):
    """Role gate for administrator-only operations. Never used for ownership."""

    status_code = 403


class NotFoundError(ClinicError):
    status_code = 404


class ConflictError(ClinicError):
    status_code = 409


class WriteConflictError(ConflictError):
    def __init__(self, message: str = "The record was modified by another request. Please retry."):
        super().__init__(message)


class RegistrationFailedError(ClinicError):
    status_code = 500

    def __init__(self, message: str = "Registration failed."):
        super().__init__(message)


def parse_uuid(value: str | uuid.UUID, field_name: str = "id") -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise InvalidIdentifierError(field_name)


def commit_or_conflict(db: Session, message: str) -> None:
    """Commit, translating constraint races into the conflict a pre-check would raise."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Constraint violation translated to conflict: %s", exc.orig)
        raise ConflictError(message) from exc
    except StaleDataError as exc:
        db.rollback()
        raise WriteConflictError() from exc
