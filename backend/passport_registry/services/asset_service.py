"""
Pipeline des fichiers : photos déposées et QR codes des passeports.

Les fichiers sont rangés dans deux répertoires sous settings.UPLOADS_DIR
(photos/ et qrcodes/) et servis sous /uploads par main.py.
Le QR code d'un passeport a un nom déterministe (qr-<public_id>.png) :
une régénération écrase l'ancien fichier.
"""

import io
import logging
import os
import secrets
import time
from pathlib import Path
from typing import Optional

import qrcode

from passport_registry.config import settings
from passport_registry.errors import PayloadTooLargeError, UnsupportedMediaError, ValidationError

logger = logging.getLogger(__name__)

UPLOADS_URL_PREFIX = "/uploads"
PHOTOS_BUCKET = "photos"
QR_CODES_BUCKET = "qrcodes"

# Type MIME accepté → extension du fichier stocké
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def _uploads_root() -> Path:
    return Path(settings.UPLOADS_DIR)


def ensure_upload_dirs() -> None:
    """Crée les répertoires de stockage s'ils n'existent pas (appelé au démarrage)."""
    for bucket in (PHOTOS_BUCKET, QR_CODES_BUCKET):
        (_uploads_root() / bucket).mkdir(parents=True, exist_ok=True)


def _save(bucket: str, filename: str, content: bytes) -> str:
    """Écrit le fichier dans le répertoire donné et retourne son URL publique."""
    directory = _uploads_root() / bucket
    directory.mkdir(parents=True, exist_ok=True)
    (directory / filename).write_bytes(content)
    return f"{UPLOADS_URL_PREFIX}/{bucket}/{filename}"


def _generate_photo_filename(extension: str) -> str:
    """Nom horodaté + aléatoire : jamais dérivé du nom de fichier envoyé par le client."""
    return f"photo-{int(time.time() * 1000)}-{secrets.token_hex(8)}{extension}"


def store_photo(content: bytes, content_type: Optional[str], filename: Optional[str] = None) -> str:
    """
    Valide et stocke une photo. Retourne son URL (/uploads/photos/...).

    - Type MIME hors liste blanche, ou extension du fichier non image → UnsupportedMediaError
    - Taille > MAX_PHOTO_SIZE_MB → PayloadTooLargeError
    - Fichier vide → ValidationError
    """
    media_type = (content_type or "").split(";")[0].strip().lower()
    if media_type not in ALLOWED_IMAGE_TYPES:
        raise UnsupportedMediaError()
    if filename:
        extension = os.path.splitext(filename)[1].lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise UnsupportedMediaError()

    if len(content) > settings.MAX_PHOTO_SIZE_MB * 1024 * 1024:
        raise PayloadTooLargeError(
            f"Файл слишком большой. Максимальный размер: {settings.MAX_PHOTO_SIZE_MB} МБ."
        )
    if not content:
        raise ValidationError("Файл фотографии пуст.")

    url = _save(PHOTOS_BUCKET, _generate_photo_filename(ALLOWED_IMAGE_TYPES[media_type]), content)
    logger.info("Photo stockée : %s (%d octets)", url, len(content))
    return url


def build_public_url(public_id: str, base_url: str) -> str:
    """URL de la page publique d'un passeport : <base_url>/p/<public_id>."""
    return f"{base_url.rstrip('/')}/p/{public_id}"


def render_qr_png(data: str) -> bytes:
    """Génère une image PNG du QR code encodant la chaîne donnée."""
    qr = qrcode.QRCode(box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def qr_code_filename(public_id: str) -> str:
    return f"qr-{public_id}.png"


def generate_qr_code(public_id: str, base_url: str) -> str:
    """
    Génère et stocke le QR code pointant vers la page publique du passeport.
    Retourne son URL, ou une chaîne vide si la génération échoue : le passeport
    reste utilisable sans QR code, l'échec est seulement journalisé.
    """
    target = build_public_url(public_id, base_url)
    try:
        png = render_qr_png(target)
        url = _save(QR_CODES_BUCKET, qr_code_filename(public_id), png)
    except Exception as exc:
        logger.warning("Génération du QR code impossible pour %s : %s", public_id, exc, exc_info=True)
        return ""
    logger.info("QR code généré : %s → %s", url, target)
    return url


def _resolve_asset_path(url: str) -> Optional[Path]:
    """Chemin local d'une URL /uploads/..., ou None si l'URL sort du répertoire de stockage."""
    prefix = UPLOADS_URL_PREFIX + "/"
    if not url or not url.startswith(prefix):
        return None
    root = _uploads_root().resolve()
    path = (root / url[len(prefix):]).resolve()
    if root not in path.parents:
        return None
    return path


def delete_asset(url: str) -> None:
    """
    Supprime le fichier correspondant à l'URL. Un fichier absent n'est pas une erreur.
    Les autres erreurs d'E/S sont propagées à l'appelant, qui décide si elles sont bloquantes.
    """
    path = _resolve_asset_path(url)
    if path is None:
        if url:
            logger.warning("URL de fichier ignorée (hors de %s) : %s", UPLOADS_URL_PREFIX, url)
        return
    try:
        path.unlink()
    except FileNotFoundError:
        return
    logger.info("Fichier supprimé : %s", url)
