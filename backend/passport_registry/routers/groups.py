"""
Router pour la gestion des groupes de passeports.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from passport_registry.auth import get_current_user
from passport_registry.database import get_db
from passport_registry.errors import NotFoundError
from passport_registry.models.user import User
from passport_registry.schemas.group import GroupCreate, GroupResponse, GroupUpdate
from passport_registry.services import group_service

router = APIRouter(prefix="/api/groups", tags=["Groupes"])


@router.get("", response_model=List[GroupResponse], summary="Lister les groupes")
def list_groups(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Retourne tous les groupes triés par nom. 503 si la base est injoignable."""
    return group_service.get_groups(db)


@router.get("/{group_id}", response_model=GroupResponse, summary="Détail d'un groupe")
def get_group(group_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    group = group_service.get_group(db, group_id)
    if group is None:
        raise NotFoundError("Группа не найдена.")
    return group


@router.post("", response_model=GroupResponse, status_code=201, summary="Créer un groupe")
def create_group(data: GroupCreate, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return group_service.create_group(db, data, performed_by=user.id)


@router.put("/{group_id}", response_model=GroupResponse, summary="Renommer un groupe")
def update_group(
    group_id: int,
    data: GroupUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return group_service.update_group(db, group_id, data, performed_by=user.id)


@router.delete("/{group_id}", status_code=204, summary="Supprimer un groupe")
def delete_group(group_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """
    Supprime un groupe définitivement.
    Bloqué (409) tant que des passeports appartiennent au groupe.
    """
    group_service.delete_group(db, group_id, performed_by=user.id)
