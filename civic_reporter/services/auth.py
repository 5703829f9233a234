"""Authentication service for signup, logins and session handling."""

from typing import Optional

import redis.asyncio as redis
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.config import settings
from civic_reporter.core.exceptions import AuthenticationError, ValidationError
from civic_reporter.core.security import (
    create_session_token,
    generate_session_id,
    hash_password,
    needs_rehash,
    verify_password,
    verify_shared_secret,
)
from civic_reporter.models.account import Account
from civic_reporter.redis import SessionStore
from civic_reporter.services.account import AccountService
from civic_reporter.utils.validators import is_valid_email

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession, redis_client: redis.Redis):
        self.db = db
        self.accounts = AccountService(db)
        self.session_store = SessionStore(redis_client)

    async def signup(
        self,
        email: Optional[str],
        password: Optional[str],
        confirm_password: Optional[str],
    ) -> Account:
        """
        Register a new citizen account.

        Args:
            email: Email address
            password: Password
            confirm_password: Password repeated

        Returns:
            Created account

        Raises:
            ValidationError: If a field is missing, the passwords differ
                or the email is already registered
        """
        email = (email or "").strip().lower()
        if not email or not password or not confirm_password:
            raise ValidationError(message="All fields are required")
        if password != confirm_password:
            raise ValidationError(
                message="Passwords do not match",
                details=[{"field": "confirmPassword", "message": "Must match password"}],
            )
        if not is_valid_email(email):
            raise ValidationError(
                message="Invalid email address",
                details=[{"field": "email", "message": "Invalid email format"}],
            )
        if len(password) < settings.password_min_length:
            raise ValidationError(
                message=f"Password must be at least {settings.password_min_length} characters",
                details=[{"field": "password", "message": "Password too short"}],
            )
        if await self.accounts.get_by_email(email):
            raise ValidationError(
                message="Email already registered",
                details=[{"field": "email", "message": "This email is already registered"}],
            )

        account = Account(
            email=email,
            password_hash=hash_password(password),
        )

        self.db.add(account)
        await self.db.flush()
        await self.db.refresh(account)

        return account

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> Account:
        """
        Verify credentials.

        Raises:
            AuthenticationError: If the account is unknown or the password is wrong
        """
        if not email or not password:
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        account = await self.accounts.get_by_email(email.strip().lower())
        if not account or not verify_password(password, account.password_hash):
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        # Upgrade hashes made with older parameters
        if needs_rehash(account.password_hash):
            account.password_hash = hash_password(password)
            await self.db.flush()

        return account

    async def authenticate_solver(
        self,
        email: Optional[str],
        password: Optional[str],
        token: Optional[str],
    ) -> Account:
        """Verify the shared solver token, then the credentials."""
        if not verify_shared_secret(token, settings.solver_token):
            raise AuthenticationError(message="Invalid solver token", code="INVALID_SOLVER_TOKEN")
        return await self.authenticate(email, password)

    async def authenticate_admin(
        self,
        email: Optional[str],
        password: Optional[str],
        secret: Optional[str],
    ) -> Account:
        """Verify the shared admin secret, then the credentials."""
        if not verify_shared_secret(secret, settings.admin_secret):
            raise AuthenticationError(message="Invalid secret key", code="INVALID_ADMIN_SECRET")
        return await self.authenticate(email, password)

    async def start_session(
        self,
        account: Account,
        previous_session_id: Optional[str] = None,
        is_solver: bool = False,
        is_admin: bool = False,
        department: Optional[str] = None,
    ) -> str:
        """
        Create a session record and return the cookie token naming it.

        Any session the caller already held is dropped, so role flags
        never carry over from one login to the next.
        """
        if previous_session_id:
            await self.session_store.delete(previous_session_id)

        session_id = generate_session_id()
        await self.session_store.create(
            session_id=session_id,
            account_id=str(account.id),
            expires_in=settings.session_ttl_seconds,
            is_solver=is_solver,
            is_admin=is_admin,
            department=department,
        )
        return create_session_token(session_id)

    async def end_session(self, session_id: str) -> None:
        """Delete a session record."""
        await self.session_store.delete(session_id)

    async def end_all_sessions(self, account_id: str) -> int:
        """Delete every session of an account. Returns how many were removed."""
        return await self.session_store.delete_all_account_sessions(account_id)
