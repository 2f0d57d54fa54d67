"""
Service métier pour les groupes de passeports.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from passport_registry.database import storage_errors
from passport_registry.errors import ConflictError, NotFoundError
from passport_registry.models.group import Group
from passport_registry.models.person import Person
from passport_registry.schemas.group import GroupCreate, GroupUpdate
from passport_registry.services.activity_service import log_activity

logger = logging.getLogger(__name__)

ENTITY_TYPE = "group"


def get_groups(db: Session) -> List[Group]:
    """Retourne tous les groupes, triés par nom."""
    with storage_errors(db):
        return db.execute(select(Group).order_by(Group.name)).scalars().all()


def get_group(db: Session, group_id: int) -> Optional[Group]:
    """Retourne un groupe par son ID, ou None si inexistant."""
    with storage_errors(db):
        return db.get(Group, group_id)


def create_group(db: Session, data: GroupCreate, performed_by: str) -> Group:
    group = Group(name=data.name, created_by=performed_by)
    with storage_errors(db):
        db.add(group)
        db.commit()
    db.refresh(group)

    log_activity(db, f'Создана группа "{group.name}"', ENTITY_TYPE, group.id, performed_by)
    return group


def update_group(db: Session, group_id: int, data: GroupUpdate, performed_by: str) -> Group:
    """Renomme un groupe. Lève NotFoundError si le groupe n'existe pas."""
    group = get_group(db, group_id)
    if group is None:
        raise NotFoundError("Группа не найдена.")

    with storage_errors(db):
        group.name = data.name
        db.commit()
    db.refresh(group)

    log_activity(db, f'Обновлена группа "{group.name}"', ENTITY_TYPE, group.id, performed_by)
    return group


def delete_group(db: Session, group_id: int, performed_by: str) -> None:
    """
    Supprime un groupe.
    Bloqué (ConflictError) tant que des passeports y sont rattachés : ils doivent
    être supprimés ou déplacés dans un autre groupe au préalable.
    """
    group = get_group(db, group_id)
    if group is None:
        raise NotFoundError("Группа не найдена.")

    with storage_errors(db):
        nb_people = db.execute(
            select(func.count()).select_from(Person).where(Person.group_id == group_id)
        ).scalar() or 0
    if nb_people:
        raise ConflictError(
            f'Невозможно удалить группу "{group.name}": в ней {nb_people} паспорт(ов).'
        )

    name = group.name
    with storage_errors(db):
        db.delete(group)
        db.commit()

    logger.info("Groupe supprimé : %s (id=%s)", name, group_id)
    log_activity(db, f'Удалена группа "{name}"', ENTITY_TYPE, group_id, performed_by)
