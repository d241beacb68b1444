"""Department Pydantic schemas."""


from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DepartmentCreate(BaseModel):
    department_code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)


class DepartmentUpdate(BaseModel):
    """Partial update; the code itself is the resource key and stays fixed."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)


class DepartmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    department_code: str
    name: str
