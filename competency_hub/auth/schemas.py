"""Auth Pydantic schemas for request / response validation."""


from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from competency_hub.common.constants import UserRole


# ── Requests ────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.hr
    department_code: Optional[str] = Field(None, max_length=20)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# ── Responses ───────────────────────────────────────────────────────

class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: UserRole
    department_code: Optional[str] = None
    created_at: Optional[datetime] = None


class TokenResponse(BaseModel):
    """Login response; ``user`` carries the username the client stores."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: str
    role: UserRole
    department_code: Optional[str] = None
    department_id: Optional[int] = None
    max_score: int


class MeResponse(UserPublic):
    permissions: list[str]
    max_score: int
