"""
Service métier pour les administrateurs.

Un administrateur est créé à sa première authentification et ses informations
de profil sont rafraîchies à chaque authentification. Seul un administrateur
principal peut activer ou désactiver un compte.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from passport_registry.config import settings
from passport_registry.database import storage_errors
from passport_registry.errors import ConflictError, NotFoundError
from passport_registry.models.user import User
from passport_registry.schemas.user import IdentityClaims
from passport_registry.services.activity_service import log_activity

logger = logging.getLogger(__name__)

ENTITY_TYPE = "admin"


def _is_configured_main_admin(email: Optional[str]) -> bool:
    if not email:
        return False
    return email.lower() in {e.lower() for e in settings.MAIN_ADMIN_EMAILS}


def get_user(db: Session, user_id: str) -> Optional[User]:
    with storage_errors(db):
        return db.get(User, user_id)


def get_admins(db: Session) -> List[User]:
    """Retourne tous les administrateurs, les plus anciens en premier."""
    with storage_errors(db):
        return db.execute(select(User).order_by(User.created_at, User.id)).scalars().all()


def upsert_user(db: Session, claims: IdentityClaims) -> User:
    """
    Crée l'utilisateur à sa première authentification, sinon met à jour son profil.
    is_active et is_main_admin ne sont jamais modifiés ici pour un compte existant.
    """
    user = get_user(db, claims.sub)
    profile = {
        "email": claims.email,
        "first_name": claims.first_name,
        "last_name": claims.last_name,
        "profile_image_url": claims.profile_image_url,
    }

    if user is None:
        user = User(
            id=claims.sub,
            is_main_admin=_is_configured_main_admin(claims.email),
            is_active=True,
            **profile,
        )
        with storage_errors(db):
            db.add(user)
            db.commit()
        db.refresh(user)
        logger.info("Nouvel administrateur enregistré : %s (main=%s)", user.id, user.is_main_admin)
        return user

    changed = {field: value for field, value in profile.items() if value is not None and getattr(user, field) != value}
    if changed:
        with storage_errors(db):
            for field, value in changed.items():
                setattr(user, field, value)
            db.commit()
        db.refresh(user)
    return user


def set_admin_active(db: Session, admin_id: str, is_active: bool, performed_by: str) -> User:
    """
    Active ou désactive un administrateur.
    Refuse de désactiver le dernier administrateur principal actif (ConflictError).
    """
    admin = get_user(db, admin_id)
    if admin is None:
        raise NotFoundError("Администратор не найден.")

    if not is_active and admin.is_main_admin and admin.is_active:
        with storage_errors(db):
            other_main_admins = db.execute(
                select(func.count()).select_from(User).where(
                    User.is_main_admin.is_(True),
                    User.is_active.is_(True),
                    User.id != admin_id,
                )
            ).scalar() or 0
        if not other_main_admins:
            raise ConflictError("Невозможно деактивировать последнего главного администратора.")

    with storage_errors(db):
        admin.is_active = is_active
        db.commit()
    db.refresh(admin)

    log_activity(
        db,
        f"Администратор {'активирован' if is_active else 'деактивирован'}",
        ENTITY_TYPE,
        admin.id,
        performed_by,
        {"admin_email": admin.email},
    )
    return admin
