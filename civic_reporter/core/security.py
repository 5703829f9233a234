"""Password hashing, session tokens and shared-secret checks."""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from jose import JWTError, jwt

from civic_reporter.config import settings

SESSION_TOKEN_TYPE = "session"

# Argon2id, 64 MiB, 3 passes
password_hasher = PasswordHasher(
    time_cost=3,
    memory_cost=64 * 1024,
    parallelism=4,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """Hash an account password for storage."""
    return password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a login attempt against the stored hash.

    Malformed hashes count as a mismatch rather than an error.
    """
    try:
        return password_hasher.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """True when the stored hash predates the current Argon2 parameters."""
    return password_hasher.check_needs_rehash(password_hash)


def verify_shared_secret(provided: Optional[str], expected: str) -> bool:
    """
    Compare a submitted shared secret with the configured one.

    An empty configured secret never matches.
    """
    if not expected or not provided:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))


def generate_session_id() -> str:
    """Generate a unique session ID."""
    return str(uuid.uuid4())


def create_session_token(
    session_id: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create the signed token stored in the session cookie.

    The token only names the server-side session record; roles and
    department stay in Redis.

    Args:
        session_id: ID of the session record
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    expires_delta = expires_delta or timedelta(seconds=settings.session_ttl_seconds)

    payload = {
        "sid": session_id,
        "type": SESSION_TOKEN_TYPE,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> str:
    """
    Verify a session token and return the session ID it names.

    Raises:
        JWTError: If the token is invalid, expired or not a session token
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    session_id = payload.get("sid")
    if payload.get("type") != SESSION_TOKEN_TYPE or not session_id:
        raise JWTError("Not a session token")
    return session_id
