"""
Router public : consultation d'un passeport via son identifiant public.
Aucune authentification : ce router ne dépend jamais de get_current_user.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from passport_registry.database import get_db
from passport_registry.errors import NotFoundError
from passport_registry.schemas.person import PersonResponse
from passport_registry.services import passport_service

router = APIRouter(prefix="/api/public", tags=["Public"])


@router.get("/people/{public_id}", response_model=PersonResponse, summary="Passeport public")
def get_public_person(public_id: str, db: Session = Depends(get_db)):
    """Page publique d'un passeport (cible du QR code)."""
    person = passport_service.get_person_by_public_id(db, public_id)
    if person is None:
        raise NotFoundError("Паспорт не найден.")
    return person
