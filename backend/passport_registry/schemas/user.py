"""
Schémas Pydantic pour les administrateurs et l'identité résolue.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr


class IdentityClaims(BaseModel):
    """Identité fournie par le fournisseur d'identité pour une requête."""
    sub: str
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None


class UserResponse(BaseModel):
    id: str
    email: Optional[str]
    first_name: Optional[str]
    last_name: Optional[str]
    profile_image_url: Optional[str]
    is_main_admin: bool
    is_active: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    model_config = {"from_attributes": True}


class AdminStatusUpdate(BaseModel):
    """Schéma d'activation / désactivation d'un administrateur (PUT /admins/{id})."""
    is_active: bool
