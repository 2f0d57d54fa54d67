"""
Router du journal d'activité (lecture seule).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from passport_registry.auth import get_current_user
from passport_registry.database import get_db
from passport_registry.models.user import User
from passport_registry.schemas.activity_log import ActivityLogResponse
from passport_registry.services import activity_service

router = APIRouter(prefix="/api/activity-logs", tags=["Journal d'activité"])


@router.get("", response_model=List[ActivityLogResponse], summary="Lister le journal d'activité")
def list_activity_logs(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Retourne toutes les entrées du journal, de la plus récente à la plus ancienne."""
    return activity_service.list_all(db)
