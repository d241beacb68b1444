"""Auth router — registration, login, logout, current user profile."""


from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from competency_hub.auth.dependencies import _extract_bearer, get_current_user
from competency_hub.auth.models import User
from competency_hub.auth.schemas import (
    LoginRequest,
    MeResponse,
    RegisterRequest,
    TokenResponse,
    UserPublic,
)
from competency_hub.auth.service import (
    authenticate,
    create_session,
    get_department_id,
    hash_token,
    register_user,
    revoke_session,
)
from competency_hub.common.constants import PERMISSIONS
from competency_hub.common.rate_limit import limiter
from competency_hub.config import settings
from competency_hub.database import get_db

router = APIRouter(prefix="", tags=["auth"])


# ── POST /register ──────────────────────────────────────────────────

@router.post("/register", response_model=UserPublic, status_code=201)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await register_user(db, body)
    return UserPublic.model_validate(user)


# ── POST /login: rate-limited credential exchange ───────────────────

@router.post("/login", response_model=TokenResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    body: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate(db, body.email, body.password)
    access_token, expires_in = await create_session(db, user)

    return TokenResponse(
        access_token=access_token,
        expires_in=expires_in,
        user=user.username,
        role=user.role,
        department_code=user.department_code,
        department_id=await get_department_id(db, user.department_code),
        max_score=settings.MAX_SCORE,
    )


# ── POST /logout: revoke current session ────────────────────────────

@router.post("/logout")
async def logout(
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    await revoke_session(db, hash_token(_extract_bearer(request)))
    return {"detail": "Logged out successfully."}


# ── GET /me: current user profile ───────────────────────────────────

@router.get("/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)):
    return MeResponse(
        **UserPublic.model_validate(current_user).model_dump(),
        permissions=PERMISSIONS.get(current_user.role, []),
        max_score=settings.MAX_SCORE,
    )
