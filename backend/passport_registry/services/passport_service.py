"""
Service métier du cycle de vie des passeports.

Création (saga) :
  1. Valider les champs saisis et l'existence du groupe
  2. Valider et stocker la photo (si fournie) : rien n'est persisté en cas de rejet
  3. Générer le public_id et insérer le passeport (photo supprimée si l'insertion échoue)
  4. Générer le QR code et enregistrer son URL ; en cas d'échec, le passeport
     reste créé avec une URL vide (mode dégradé journalisé)
  5. Écrire l'entrée du journal d'activité (best-effort)

L'auteur de chaque action (performed_by) est toujours passé explicitement :
l'id d'un administrateur, ou SYSTEM_PERFORMER pour le contrôle automatique.
"""

import logging
import re
import secrets
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from passport_registry.config import settings
from passport_registry.database import storage_errors
from passport_registry.errors import AppError, NotFoundError, StorageError, ValidationError
from passport_registry.models.activity_log import SYSTEM_PERFORMER
from passport_registry.models.group import Group
from passport_registry.models.person import Person
from passport_registry.schemas.person import PersonCreate, PersonUpdate
from passport_registry.services import asset_service
from passport_registry.services.activity_service import log_activity

logger = logging.getLogger(__name__)

ENTITY_TYPE = "passport"

PUBLIC_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")

# Champs jamais modifiables par l'appelant, quel que soit le contenu de la requête
PROTECTED_FIELDS = frozenset({"id", "public_id", "qr_code_url", "created_by", "created_at", "updated_at", "photo_url"})

AUTO_EXPIRED_ACTION = "Паспорт автоматически деактивирован из-за истечения срока действия"
MANUAL_EXPIRED_ACTION = "Паспорт деактивирован вручную"


@dataclass
class PhotoUpload:
    """Photo reçue dans une requête multipart, indépendante de FastAPI."""
    content: bytes
    content_type: Optional[str]
    filename: Optional[str] = None


def generate_public_id() -> str:
    """Jeton public non devinable : 16 octets aléatoires en hexadécimal (32 caractères)."""
    return secrets.token_hex(16)


def _validate(schema, data):
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def _ensure_group_exists(db: Session, group_id: int) -> None:
    with storage_errors(db):
        group = db.get(Group, group_id)
    if group is None:
        raise ValidationError(
            "Группа не найдена.",
            errors=[{"field": "group_id", "message": "Группа не найдена."}],
        )


def _discard_asset(url: str) -> None:
    """Suppression best-effort : un échec est journalisé, jamais propagé."""
    if not url:
        return
    try:
        asset_service.delete_asset(url)
    except OSError as exc:
        logger.warning("Suppression du fichier %s impossible : %s", url, exc)


def _get_or_404(db: Session, person_id: int) -> Person:
    with storage_errors(db):
        person = db.get(Person, person_id)
    if person is None:
        raise NotFoundError("Паспорт не найден.")
    return person


def get_people(db: Session) -> List[Person]:
    """Retourne tous les passeports, du plus récent au plus ancien."""
    with storage_errors(db):
        return db.execute(
            select(Person).order_by(Person.created_at.desc(), Person.id.desc())
        ).scalars().all()


def get_person(db: Session, person_id: int) -> Optional[Person]:
    """Retourne un passeport par son id interne, ou None s'il n'existe pas."""
    with storage_errors(db):
        return db.get(Person, person_id)


def get_person_by_public_id(db: Session, public_id: str) -> Optional[Person]:
    """Retourne un passeport par son identifiant public, ou None s'il n'existe pas."""
    with storage_errors(db):
        return db.execute(
            select(Person).where(Person.public_id == public_id)
        ).scalar()


def create_person(
    db: Session,
    data: Union[PersonCreate, Mapping[str, Any]],
    performed_by: str,
    photo: Optional[PhotoUpload] = None,
    base_url: Optional[str] = None,
) -> Person:
    """
    Crée un passeport et son QR code.
    Lève ValidationError, UnsupportedMediaError, PayloadTooLargeError ou StorageError.
    """
    person_data = _validate(PersonCreate, data)
    _ensure_group_exists(db, person_data.group_id)

    photo_url = ""
    if photo is not None:
        photo_url = asset_service.store_photo(photo.content, photo.content_type, photo.filename)

    public_id = generate_public_id()
    person = Person(
        **person_data.model_dump(),
        public_id=public_id,
        photo_url=photo_url,
        qr_code_url="",
        created_by=performed_by,
    )
    try:
        with storage_errors(db):
            db.add(person)
            db.commit()
    except StorageError:
        _discard_asset(photo_url)
        raise
    db.refresh(person)

    qr_code_url = asset_service.generate_qr_code(public_id, base_url or settings.PUBLIC_BASE_URL)
    if qr_code_url:
        try:
            with storage_errors(db):
                person.qr_code_url = qr_code_url
                db.commit()
        except StorageError:
            logger.error("URL du QR code non enregistrée pour le passeport %s", person.id)
        db.refresh(person)

    logger.info("Passeport créé : %s (id=%s, public_id=%s)", person.full_name, person.id, public_id)
    log_activity(
        db,
        f'Создан паспорт для "{person.full_name}"',
        ENTITY_TYPE,
        person.id,
        performed_by,
        {"passport_number": person.passport_number},
    )
    return person


def update_person(
    db: Session,
    person_id: int,
    changes: Union[PersonUpdate, Mapping[str, Any]],
    performed_by: str,
    photo: Optional[PhotoUpload] = None,
) -> Person:
    """
    Met à jour les champs fournis d'un passeport.
    Les champs protégés (public_id, qr_code_url, created_by, created_at...) sont
    retirés avant validation. La photo n'est remplacée que si une nouvelle est fournie.
    Lève NotFoundError si le passeport n'existe pas (aucune entrée de journal).
    """
    person = _get_or_404(db, person_id)

    if not isinstance(changes, PersonUpdate):
        changes = {k: v for k, v in dict(changes).items() if k not in PROTECTED_FIELDS}
    update_data = _validate(PersonUpdate, changes).model_dump(exclude_unset=True)

    if "group_id" in update_data:
        _ensure_group_exists(db, update_data["group_id"])

    new_photo_url = ""
    if photo is not None:
        new_photo_url = asset_service.store_photo(photo.content, photo.content_type, photo.filename)
    old_photo_url = person.photo_url

    try:
        with storage_errors(db):
            for field, value in update_data.items():
                setattr(person, field, value)
            if new_photo_url:
                person.photo_url = new_photo_url
            db.commit()
    except StorageError:
        _discard_asset(new_photo_url)
        raise
    db.refresh(person)

    if new_photo_url and old_photo_url and old_photo_url != new_photo_url:
        _discard_asset(old_photo_url)

    log_activity(
        db,
        f'Обновлен паспорт "{person.full_name}"',
        ENTITY_TYPE,
        person.id,
        performed_by,
        {"passport_number": person.passport_number},
    )
    return person


def delete_person(db: Session, person_id: int, performed_by: str) -> None:
    """
    Supprime un passeport puis sa photo et son QR code (best-effort).
    Lève NotFoundError si le passeport n'existe pas.
    """
    person = _get_or_404(db, person_id)
    full_name = person.full_name
    passport_number = person.passport_number
    assets = (person.photo_url, person.qr_code_url)

    with storage_errors(db):
        db.delete(person)
        db.commit()

    for url in assets:
        _discard_asset(url)

    logger.info("Passeport supprimé : %s (id=%s)", full_name, person_id)
    log_activity(
        db,
        f'Удален паспорт "{full_name}"',
        ENTITY_TYPE,
        person_id,
        performed_by,
        {"passport_number": passport_number},
    )


def mark_expired(
    db: Session,
    person_id: int,
    performed_by: str,
    details: Optional[Dict[str, Any]] = None,
) -> Person:
    """
    Passe le passeport à status=False. Sans effet visible s'il est déjà inactif,
    mais chaque appel écrit une entrée de journal : l'appelant automatique
    (contrôle d'expiration) ne l'invoque que pour une transition réelle.
    """
    person = _get_or_404(db, person_id)

    if person.status:
        with storage_errors(db):
            person.status = False
            db.commit()
        db.refresh(person)

    action = AUTO_EXPIRED_ACTION if performed_by == SYSTEM_PERFORMER else MANUAL_EXPIRED_ACTION
    payload = {
        "full_name": person.full_name,
        "expiration_date": person.expiration_date.isoformat(),
    }
    payload.update(details or {})
    log_activity(db, action, ENTITY_TYPE, person.id, performed_by, payload)
    return person


def regenerate_qr_code(
    db: Session,
    person_id: int,
    performed_by: str,
    base_url: Optional[str] = None,
) -> Person:
    """Régénère le QR code d'un passeport (le fichier qr-<public_id>.png est écrasé)."""
    person = _get_or_404(db, person_id)

    qr_code_url = asset_service.generate_qr_code(person.public_id, base_url or settings.PUBLIC_BASE_URL)
    if not qr_code_url:
        raise AppError("Не удалось сгенерировать QR-код.", status_code=500)

    with storage_errors(db):
        person.qr_code_url = qr_code_url
        db.commit()
    db.refresh(person)

    log_activity(
        db,
        f'Обновлен QR-код паспорта "{person.full_name}"',
        ENTITY_TYPE,
        person.id,
        performed_by,
        {"passport_number": person.passport_number},
    )
    return person
