"""
Schémas Pydantic pour les passeports.

Note : on importe datetime en tant que module (dt) pour éviter le conflit de nommage
entre les champs de type date et le type `datetime.date` dans Pydantic v2.
"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, field_validator


class PersonCreate(BaseModel):
    """Champs saisis par l'administrateur à la création d'un passeport."""
    full_name: str
    birth_date: dt.date
    passport_number: str
    expiration_date: dt.date
    group_id: int
    notes: str = ""
    status: bool = True

    model_config = {"extra": "ignore"}

    @field_validator("full_name", "passport_number")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Поле не может быть пустым.")
        return v.strip()


class PersonUpdate(BaseModel):
    """
    Champs modifiables d'un passeport. Les champs absents ne sont pas modifiés.
    public_id, qr_code_url, created_by et created_at n'en font pas partie.
    """
    full_name: Optional[str] = None
    birth_date: Optional[dt.date] = None
    passport_number: Optional[str] = None
    expiration_date: Optional[dt.date] = None
    group_id: Optional[int] = None
    notes: Optional[str] = None
    status: Optional[bool] = None

    model_config = {"extra": "ignore"}

    @field_validator("full_name", "passport_number")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Поле не может быть пустым.")
        return v.strip() if v else v

    @field_validator("full_name", "passport_number", "birth_date", "expiration_date", "group_id", "status")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Поле не может быть пустым.")
        return v

    @field_validator("notes")
    @classmethod
    def notes_default(cls, v: Optional[str]) -> str:
        return v or ""


class PersonResponse(BaseModel):
    id: int
    public_id: str
    full_name: str
    birth_date: dt.date
    passport_number: str
    expiration_date: dt.date
    notes: str
    group_id: int
    status: bool
    photo_url: str
    qr_code_url: str
    created_by: Optional[str]
    created_at: Optional[dt.datetime]
    updated_at: Optional[dt.datetime]

    model_config = {"from_attributes": True}
