"""
Router pour les passeports.

POST et PUT acceptent un formulaire multipart avec un champ fichier optionnel
`photo`. Les autres champs sont des champs de formulaire convertis vers leur type :
`status` n'accepte que les chaînes littérales "true" et "false", les entiers et les
dates sont convertis par le schéma Pydantic du service.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from sqlalchemy.orm import Session

from passport_registry.auth import get_current_user
from passport_registry.config import settings
from passport_registry.database import get_db
from passport_registry.errors import NotFoundError, ValidationError
from passport_registry.models.user import User
from passport_registry.schemas.person import PersonResponse
from passport_registry.services import passport_service
from passport_registry.services.passport_service import PhotoUpload

router = APIRouter(prefix="/api/people", tags=["Passeports"])

FORM_BOOLEANS = {"true": True, "false": False}


def _public_base_url(request: Request) -> str:
    return settings.PUBLIC_BASE_URL or str(request.base_url)


def _photo_from_upload(photo: Optional[UploadFile]) -> Optional[PhotoUpload]:
    if photo is None or not photo.filename:
        return None
    return PhotoUpload(content=photo.file.read(), content_type=photo.content_type, filename=photo.filename)


def _form_fields(**fields: Optional[str]) -> dict:
    """
    Ne garde que les champs envoyés. `status` n'accepte que les littéraux
    "true" et "false" ; toute autre valeur lève ValidationError.
    """
    data = {name: value for name, value in fields.items() if value is not None}
    if "status" in data:
        if data["status"] not in FORM_BOOLEANS:
            raise ValidationError(
                "Некорректные данные: status.",
                errors=[{"field": "status", "message": "Ожидается \"true\" или \"false\"."}],
            )
        data["status"] = FORM_BOOLEANS[data["status"]]
    return data


@router.get("", response_model=List[PersonResponse], summary="Lister les passeports")
def list_people(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Retourne tous les passeports, du plus récent au plus ancien. 503 si la base est injoignable."""
    return passport_service.get_people(db)


@router.get("/{person_id}", response_model=PersonResponse, summary="Détail d'un passeport")
def get_person(person_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    person = passport_service.get_person(db, person_id)
    if person is None:
        raise NotFoundError("Паспорт не найден.")
    return person


@router.post("", response_model=PersonResponse, status_code=201, summary="Créer un passeport")
def create_person(
    request: Request,
    full_name: Optional[str] = Form(None),
    birth_date: Optional[str] = Form(None),
    passport_number: Optional[str] = Form(None),
    expiration_date: Optional[str] = Form(None),
    group_id: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Crée un passeport, stocke la photo éventuelle et génère son QR code.
    Le public_id est généré par le serveur.
    """
    data = _form_fields(
        full_name=full_name,
        birth_date=birth_date,
        passport_number=passport_number,
        expiration_date=expiration_date,
        group_id=group_id,
        notes=notes,
        status=status,
    )
    data.setdefault("status", False)
    return passport_service.create_person(
        db,
        data,
        performed_by=user.id,
        photo=_photo_from_upload(photo),
        base_url=_public_base_url(request),
    )


@router.put("/{person_id}", response_model=PersonResponse, summary="Modifier un passeport")
def update_person(
    person_id: int,
    full_name: Optional[str] = Form(None),
    birth_date: Optional[str] = Form(None),
    passport_number: Optional[str] = Form(None),
    expiration_date: Optional[str] = Form(None),
    group_id: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """
    Met à jour les champs fournis. La photo n'est remplacée que si un fichier est envoyé.
    public_id, QR code, auteur et date de création ne sont jamais modifiables.
    """
    data = _form_fields(
        full_name=full_name,
        birth_date=birth_date,
        passport_number=passport_number,
        expiration_date=expiration_date,
        group_id=group_id,
        notes=notes,
        status=status,
    )
    return passport_service.update_person(
        db, person_id, data, performed_by=user.id, photo=_photo_from_upload(photo)
    )


@router.delete("/{person_id}", status_code=204, summary="Supprimer un passeport")
def delete_person(person_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Supprime le passeport ainsi que sa photo et son QR code."""
    passport_service.delete_person(db, person_id, performed_by=user.id)


@router.post("/{person_id}/expire", response_model=PersonResponse, summary="Désactiver un passeport")
def expire_person(person_id: int, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Désactivation manuelle (status=False) par un administrateur."""
    return passport_service.mark_expired(db, person_id, performed_by=user.id)


@router.post("/{person_id}/qr-code", response_model=PersonResponse, summary="Régénérer le QR code")
def regenerate_qr_code(
    person_id: int,
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return passport_service.regenerate_qr_code(
        db, person_id, performed_by=user.id, base_url=_public_base_url(request)
    )
