"""
Service du journal d'activité (audit).

Le journal est append-only : ce module n'expose ni mise à jour ni suppression.
Chaque mutation sur un groupe, un passeport ou un administrateur y écrit
exactement une entrée, y compris les actions automatiques ("system").
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from passport_registry.database import storage_errors
from passport_registry.errors import StorageError
from passport_registry.models.activity_log import ActivityLog
from passport_registry.models.user import User
from passport_registry.schemas.activity_log import ActivityLogResponse
from passport_registry.schemas.user import UserResponse

logger = logging.getLogger(__name__)


def append(
    db: Session,
    action: str,
    entity_type: str,
    entity_id: Any,
    performed_by: str,
    details: Optional[Dict[str, Any]] = None,
) -> ActivityLog:
    """
    Ajoute une entrée au journal dans sa propre transaction.
    Lève StorageError si l'écriture échoue (rien n'est écrit partiellement).
    """
    entry = ActivityLog(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        performed_by=performed_by,
        details=details,
    )
    with storage_errors(db):
        db.add(entry)
        db.commit()
    db.refresh(entry)
    return entry


def log_activity(
    db: Session,
    action: str,
    entity_type: str,
    entity_id: Any,
    performed_by: str,
    details: Optional[Dict[str, Any]] = None,
) -> Optional[ActivityLog]:
    """
    Variante best-effort de append() utilisée par les services métier :
    un échec du journal est tracé mais ne fait pas échouer l'opération principale.
    """
    try:
        return append(db, action, entity_type, entity_id, performed_by, details)
    except StorageError as exc:
        logger.error(
            "Échec d'écriture du journal (%s %s, action '%s') : %s",
            entity_type, entity_id, action, exc.__cause__ or exc,
        )
        return None


def list_all(db: Session) -> List[ActivityLogResponse]:
    """
    Retourne toutes les entrées, de la plus récente à la plus ancienne,
    enrichies avec l'administrateur auteur quand il existe.
    """
    with storage_errors(db):
        rows = db.execute(
            select(ActivityLog, User)
            .outerjoin(User, User.id == ActivityLog.performed_by)
            .order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        ).all()

    return [
        ActivityLogResponse(
            id=log.id,
            action=log.action,
            entity_type=log.entity_type,
            entity_id=log.entity_id,
            performed_by=log.performed_by,
            performed_by_user=UserResponse.model_validate(user) if user is not None else None,
            details=log.details,
            timestamp=log.timestamp,
        )
        for log, user in rows
    ]
