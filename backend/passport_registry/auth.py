"""
Résolution de l'identité de la requête et contrôle d'accès.

L'authentification elle-même est déléguée à un fournisseur d'identité externe.
L'application ne consomme qu'un IdentityResolver injecté via Depends, qui
transforme une requête en IdentityClaims (ou None si non authentifiée).
Aucune identité « courante » n'est stockée globalement : l'utilisateur résolu
est passé explicitement aux services (performed_by).
"""

import logging
from functools import lru_cache
from typing import Optional, Protocol

from fastapi import Depends, Request
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from passport_registry.config import settings
from passport_registry.database import get_db
from passport_registry.errors import ForbiddenError, UnauthenticatedError
from passport_registry.models.user import User
from passport_registry.schemas.user import IdentityClaims
from passport_registry.services import admin_service

logger = logging.getLogger(__name__)


class IdentityResolver(Protocol):
    def resolve(self, request: Request) -> Optional[IdentityClaims]:
        ...


class HeaderIdentityResolver:
    """
    Lit l'identité posée par le reverse proxy d'authentification dans les en-têtes
    de la requête (AUTH_USER_HEADER, AUTH_EMAIL_HEADER, AUTH_NAME_HEADER).
    Le proxy doit supprimer ces en-têtes des requêtes entrantes.
    """

    def __init__(self, user_header: str, email_header: str, name_header: str):
        self.user_header = user_header
        self.email_header = email_header
        self.name_header = name_header

    def resolve(self, request: Request) -> Optional[IdentityClaims]:
        sub = (request.headers.get(self.user_header) or "").strip()
        if not sub:
            return None

        first_name, last_name = None, None
        name = (request.headers.get(self.name_header) or "").strip()
        if name:
            first_name, _, last_name = name.partition(" ")

        try:
            return IdentityClaims(
                sub=sub,
                email=request.headers.get(self.email_header) or None,
                first_name=first_name,
                last_name=last_name or None,
            )
        except PydanticValidationError:
            logger.warning("En-têtes d'identité invalides pour %s", sub)
            return None


@lru_cache
def get_identity_resolver() -> IdentityResolver:
    """
    Dépendance FastAPI, remplaçable via app.dependency_overrides.
    Le résolveur est construit au premier appel à partir des en-têtes configurés.
    """
    return HeaderIdentityResolver(
        settings.AUTH_USER_HEADER,
        settings.AUTH_EMAIL_HEADER,
        settings.AUTH_NAME_HEADER,
    )


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    resolver: IdentityResolver = Depends(get_identity_resolver),
) -> User:
    """
    Retourne l'administrateur authentifié (créé ou mis à jour au passage).
    401 si la requête n'est pas authentifiée, 403 si le compte est désactivé.
    """
    claims = resolver.resolve(request)
    if claims is None:
        raise UnauthenticatedError()

    user = admin_service.upsert_user(db, claims)
    if not user.is_active:
        raise ForbiddenError("Учетная запись деактивирована.")
    return user


def require_main_admin(user: User = Depends(get_current_user)) -> User:
    """Réservé à l'administrateur principal."""
    if not user.is_main_admin:
        raise ForbiddenError("Только главный администратор может выполнить это действие.")
    return user
