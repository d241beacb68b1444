"""Auth service — password hashing, JWT issuance, session lifecycle."""

from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.models import User, UserSession
from competency_hub.auth.schemas import RegisterRequest
from competency_hub.common.constants import UserRole
from competency_hub.common.exceptions import ConflictError, ValidationException
from competency_hub.config import settings
from competency_hub.departments.models import Department

logger = logging.getLogger(__name__)

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


# ── Passwords ───────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return _pwd_context.verify(password, password_hash)


# ── Registration ────────────────────────────────────────────────────

async def register_user(db: AsyncSession, data: RegisterRequest) -> User:
    """Create a user account; HODs must belong to an existing department."""
    email = data.email.lower()
    username = data.username.strip()

    result = await db.execute(
        select(User).where(or_(User.username == username, User.email == email)),
    )
    existing = result.scalars().first()
    if existing is not None:
        if existing.username == username:
            raise ConflictError("username", username)
        raise ConflictError("email", email)

    department_code = data.department_code.strip() if data.department_code else None
    if department_code:
        dept = await db.execute(
            select(Department.id).where(Department.department_code == department_code),
        )
        if dept.scalar() is None:
            raise ValidationException(
                {"department_code": [f"Department '{department_code}' does not exist."]},
            )
    elif data.role == UserRole.hod:
        raise ValidationException(
            {"department_code": ["A department is required for the HOD role."]},
        )

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(data.password),
        role=data.role,
        department_code=department_code,
    )
    db.add(user)
    await db.flush()
    logger.info("Registered %s user %s", user.role.value, user.username)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the user for valid credentials, or raise 401."""
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalars().first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Failed login attempt for %s", email.lower())
        raise HTTPException(status_code=401, detail="Invalid email or password.")
    return user


async def get_department_id(db: AsyncSession, department_code: Optional[str]) -> Optional[int]:
    if not department_code:
        return None
    result = await db.execute(
        select(Department.id).where(Department.department_code == department_code),
    )
    return result.scalar()


# ── JWT helpers ─────────────────────────────────────────────────────

def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def create_access_token(user: User) -> tuple[str, int]:
    """Return (encoded_jwt, expires_in_seconds)."""
    expires_in = settings.JWT_EXPIRY_HOURS * 3600
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role.value,
        "type": "access",
        "jti": uuid.uuid4().hex,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_in


# ── Session management ──────────────────────────────────────────────

async def create_session(db: AsyncSession, user: User) -> tuple[str, int]:
    """Issue an access token and persist its session row."""
    access_token, expires_in = create_access_token(user)
    session = UserSession(
        user_id=user.id,
        token_hash=hash_token(access_token),
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    )
    db.add(session)
    await db.flush()
    logger.info("Session opened for %s", user.username)
    return access_token, expires_in


async def revoke_session(db: AsyncSession, token_hash: str) -> None:
    """Mark a session as revoked by its token hash."""
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == token_hash),
    )
    session = result.scalars().first()
    if session:
        session.is_revoked = True
        await db.flush()
