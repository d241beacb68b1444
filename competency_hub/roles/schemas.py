"""Role and role-competency Pydantic schemas."""


from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RoleCreate(BaseModel):
    role_code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)


class RoleUpdate(BaseModel):
    role_code: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=150)


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    role_code: str
    name: str


# ── Role ↔ competency assignment ────────────────────────────────────

class RoleCompetencyItem(BaseModel):
    """A competency code with an explicit required score.

    Omitting ``required_score`` falls back to the configured default.
    """

    competency_code: str = Field(..., min_length=1)
    required_score: Optional[int] = None


# Bare codes and explicit items may be mixed in one request.
RoleCompetencyAssignment = list[Union[str, RoleCompetencyItem]]


class RoleCompetencyResponse(BaseModel):
    competency_id: int
    code: str
    name: str
    description: Optional[str] = None
    required_score: int
