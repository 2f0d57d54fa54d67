"""
Schémas Pydantic pour le journal d'activité.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel

from passport_registry.schemas.user import UserResponse


class ActivityLogResponse(BaseModel):
    """
    Entrée du journal. performed_by_user est null pour la sentinelle "system"
    (et pour un administrateur inconnu) : ce n'est pas une erreur.
    """
    id: int
    action: str
    entity_type: str
    entity_id: str
    performed_by: str
    performed_by_user: Optional[UserResponse] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime

    model_config = {"from_attributes": True}
