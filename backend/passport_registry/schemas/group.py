"""
Schémas Pydantic pour les groupes.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class GroupCreate(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Название группы не может быть пустым.")
        return v.strip()


class GroupUpdate(GroupCreate):
    pass


class GroupResponse(BaseModel):
    id: int
    name: str
    created_by: Optional[str]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}
