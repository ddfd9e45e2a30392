"""
Credential Store

Owns everything about a user record that the auth flow treats as opaque:
password hashing and policy, e-mail uniqueness, the confirmation flag, and
single-use confirmation / password-reset tokens.

Mutating operations return an ``IdentityResult`` (success flag plus the list
of error messages) rather than raising.
"""

import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import generate_opaque_token, get_password_hash, hash_token, verify_password
from app.core.time import as_utc, utcnow
from app.models.user import User
from app.models.user_token import UserToken

EMAIL_CONFIRMATION = "email_confirmation"
PASSWORD_RESET = "password_reset"

TOKEN_LIFETIMES = {
    EMAIL_CONFIRMATION: timedelta(hours=settings.EMAIL_CONFIRMATION_TOKEN_HOURS),
    PASSWORD_RESET: timedelta(hours=settings.PASSWORD_RESET_TOKEN_HOURS),
}

INVALID_TOKEN_MESSAGE = "Invalid token."


@dataclass(frozen=True)
class IdentityResult:
    succeeded: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: str) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def password_policy_errors(password: str) -> List[str]:
    password = password or ""
    errors = []
    if len(password) < 8:
        errors.append("Passwords must be at least 8 characters.")
    if not re.search(r"[^a-zA-Z0-9]", password):
        errors.append("Passwords must have at least one non alphanumeric character.")
    if not re.search(r"[0-9]", password):
        errors.append("Passwords must have at least one digit ('0'-'9').")
    if not re.search(r"[a-z]", password):
        errors.append("Passwords must have at least one lowercase ('a'-'z').")
    if not re.search(r"[A-Z]", password):
        errors.append("Passwords must have at least one uppercase ('A'-'Z').")
    return errors


class CredentialStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    # ==================== Lookup ====================

    async def find_by_email(self, email: str) -> Optional[User]:
        normalized = normalize_email(email)
        if not normalized:
            return None
        result = await self.db.execute(select(User).filter(User.normalized_email == normalized))
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str) -> Optional[User]:
        if not user_id:
            return None
        result = await self.db.execute(select(User).filter(User.id == str(user_id)))
        return result.scalar_one_or_none()

    # ==================== Accounts ====================

    async def create_user(self, user: User, password: str) -> IdentityResult:
        errors = password_policy_errors(password)
        if await self.find_by_email(user.email):
            errors.insert(0, f"Email '{user.email}' is already taken.")
        if errors:
            return IdentityResult.failed(*errors)

        user.normalized_email = normalize_email(user.email)
        user.password_hash = get_password_hash(password)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return IdentityResult.success()

    async def verify_password(self, user: User, password: str) -> bool:
        return verify_password(password or "", user.password_hash)

    async def update_user(self, user: User) -> IdentityResult:
        await self.db.commit()
        return IdentityResult.success()

    # ==================== Single-use tokens ====================

    async def generate_token(self, user: User, purpose: str) -> str:
        raw_token = generate_opaque_token(32)
        self.db.add(UserToken(
            user_id=user.id,
            purpose=purpose,
            token_hash=hash_token(raw_token),
            expires_at=utcnow() + TOKEN_LIFETIMES[purpose],
        ))
        await self.db.commit()
        return raw_token

    async def _consume_token(self, user: User, purpose: str, raw_token: str) -> bool:
        if not raw_token:
            return False
        result = await self.db.execute(
            select(UserToken).filter(
                UserToken.user_id == user.id,
                UserToken.purpose == purpose,
                UserToken.token_hash == hash_token(raw_token),
                UserToken.consumed_at.is_(None),
            )
        )
        record = result.scalar_one_or_none()
        if not record or as_utc(record.expires_at) <= utcnow():
            return False
        record.consumed_at = utcnow()
        return True

    async def confirm_email(self, user: User, raw_token: str) -> IdentityResult:
        if not await self._consume_token(user, EMAIL_CONFIRMATION, raw_token):
            return IdentityResult.failed(INVALID_TOKEN_MESSAGE)
        user.email_confirmed = True
        await self.db.commit()
        return IdentityResult.success()

    async def reset_password(self, user: User, raw_token: str, new_password: str) -> IdentityResult:
        errors = password_policy_errors(new_password)
        if errors:
            return IdentityResult.failed(*errors)
        if not await self._consume_token(user, PASSWORD_RESET, raw_token):
            return IdentityResult.failed(INVALID_TOKEN_MESSAGE)
        user.password_hash = get_password_hash(new_password)
        await self.db.commit()
        return IdentityResult.success()
