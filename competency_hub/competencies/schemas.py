"""Competency Pydantic schemas."""


from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CompetencyCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None


class CompetencyUpdate(BaseModel):
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None


class CompetencyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    description: Optional[str] = None
