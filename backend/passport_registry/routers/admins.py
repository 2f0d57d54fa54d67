"""
Router pour les administrateurs.
GET /api/auth/user : administrateur courant
GET /api/admins, PUT /api/admins/{id} : réservés à l'administrateur principal
POST /api/admin/expiration-check : lancement manuel du contrôle d'expiration
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from passport_registry.auth import get_current_user, require_main_admin
from passport_registry.database import get_db
from passport_registry.models.user import User
from passport_registry.schemas.expiration import ExpirationReport
from passport_registry.schemas.user import AdminStatusUpdate, UserResponse
from passport_registry.services import admin_service, expiration_service

router = APIRouter(prefix="/api", tags=["Administrateurs"])


@router.get("/auth/user", response_model=UserResponse, summary="Administrateur courant")
def get_auth_user(user: User = Depends(get_current_user)):
    return user


@router.get("/admins", response_model=List[UserResponse], summary="Lister les administrateurs")
def list_admins(db: Session = Depends(get_db), user: User = Depends(require_main_admin)):
    return admin_service.get_admins(db)


@router.put("/admins/{admin_id}", response_model=UserResponse, summary="Activer / désactiver un administrateur")
def update_admin_status(
    admin_id: str,
    data: AdminStatusUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_main_admin),
):
    """Refusé (409) s'il s'agit de désactiver le dernier administrateur principal actif."""
    return admin_service.set_admin_active(db, admin_id, data.is_active, performed_by=user.id)


@router.post("/admin/expiration-check", response_model=ExpirationReport, summary="Lancer le contrôle d'expiration")
def run_expiration_check(db: Session = Depends(get_db), user: User = Depends(require_main_admin)):
    """Exécute immédiatement le contrôle quotidien et retourne son rapport."""
    return expiration_service.run_expiration_check(db)
