"""Module: security."""

import hashlib
import hmac
import os
import threading
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from secrets import token_urlsafe

from vetclinic.core.config import settings
from vetclinic.core.errors import AuthenticationError

# Shared password hashing format/version marker.
PASSWORD_SCHEME = "pbkdf2_sha256"
PASSWORD_ITERATIONS = 390000


def hash_password(password: str) -> str:
    """
    Create a PBKDF2-SHA256 password hash string.

    Stored format:
      pbkdf2_sha256$<iterations>$<salt_hex>$<hash_hex>
    """
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        PASSWORD_ITERATIONS,
    )
    return f"{PASSWORD_SCHEME}${PASSWORD_ITERATIONS}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Verify a password against a stored PBKDF2 hash string."""
    if not stored or not stored.startswith(f"{PASSWORD_SCHEME}$"):
        return False

    try:
        _, iterations_raw, salt_hex, hash_hex = stored.split("$", 3)
        iterations = int(iterations_raw)
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False

    computed = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt,
        iterations,
    )
    return hmac.compare_digest(computed, expected)


# -------------------------
# Opaque bearer tokens
# -------------------------
@dataclass(frozen=True)
class IssuedToken:
    user_id: uuid.UUID
    expires_at: datetime


_TOKENS: dict[str, IssuedToken] = {}
_TOKENS_LOCK = threading.Lock()


def issue_token(user_id: uuid.UUID, ttl_minutes: int | None = None) -> str:
    ttl = settings.access_token_ttl_minutes if ttl_minutes is None else ttl_minutes
    token = token_urlsafe(32)
    now = datetime.now(UTC)
    with _TOKENS_LOCK:
        # Drop tokens that expired without ever being presented again.
        for stale in [key for key, issued in _TOKENS.items() if issued.expires_at <= now]:
            del _TOKENS[stale]
        _TOKENS[token] = IssuedToken(user_id=user_id, expires_at=now + timedelta(minutes=ttl))
    return token


def resolve_token(token: str) -> uuid.UUID:
    """Return the identity id behind a token, or raise AuthenticationError."""
    with _TOKENS_LOCK:
        issued = _TOKENS.get(token)
        if issued is None:
            raise AuthenticationError("Invalid or expired token")
        if issued.expires_at <= datetime.now(UTC):
            del _TOKENS[token]
            raise AuthenticationError("Invalid or expired token")
    return issued.user_id


def revoke_token(token: str) -> None:
    with _TOKENS_LOCK:
        _TOKENS.pop(token, None)
