"""
Tests unitaires du pipeline de fichiers (photos, QR codes).
"""

import re
from pathlib import Path
from unittest.mock import patch

import pytest

from passport_registry.config import settings
from passport_registry.errors import PayloadTooLargeError, UnsupportedMediaError, ValidationError
from passport_registry.services import asset_service
from passport_registry.services.asset_service import (
    build_public_url,
    delete_asset,
    ensure_upload_dirs,
    generate_qr_code,
    render_qr_png,
    store_photo,
)

PUBLIC_ID = "0123456789abcdef0123456789abcdef"


def local_path(url: str) -> Path:
    return Path(settings.UPLOADS_DIR) / url[len("/uploads/"):]


# ============================================================
# store_photo
# ============================================================

@pytest.mark.parametrize("content_type,extension", [
    ("image/jpeg", ".jpg"),
    ("image/png", ".png"),
    ("image/gif", ".gif"),
    ("image/webp", ".webp"),
])
def test_store_photo_types_autorises(content_type, extension):
    url = store_photo(b"data", content_type)
    assert re.fullmatch(rf"/uploads/photos/photo-\d+-[0-9a-f]{{16}}\{extension}", url)
    assert local_path(url).read_bytes() == b"data"


def test_store_photo_nom_client_ignore():
    """Le nom de fichier du client n'est jamais utilisé pour le stockage."""
    url = store_photo(b"data", "image/png", filename="../../etc/passwd.png")
    assert "passwd" not in url
    assert local_path(url).parent == Path(settings.UPLOADS_DIR) / "photos"


def test_store_photo_noms_distincts():
    assert store_photo(b"a", "image/png") != store_photo(b"a", "image/png")


def test_store_photo_type_refuse():
    with pytest.raises(UnsupportedMediaError):
        store_photo(b"text", "text/plain", filename="notes.txt")


def test_store_photo_extension_refusee():
    """Type MIME image mais extension non image → refusé."""
    with pytest.raises(UnsupportedMediaError):
        store_photo(b"data", "image/png", filename="script.php")


def test_store_photo_type_absent():
    with pytest.raises(UnsupportedMediaError):
        store_photo(b"data", None)


def test_store_photo_trop_lourde():
    with pytest.raises(PayloadTooLargeError):
        store_photo(b"\x00" * (5 * 1024 * 1024 + 1), "image/jpeg")


def test_store_photo_taille_limite_acceptee():
    url = store_photo(b"\x00" * (5 * 1024 * 1024), "image/jpeg")
    assert local_path(url).exists()


def test_store_photo_vide():
    with pytest.raises(ValidationError):
        store_photo(b"", "image/png")


# ============================================================
# QR codes
# ============================================================

def test_build_public_url():
    assert build_public_url(PUBLIC_ID, "https://x.example/") == f"https://x.example/p/{PUBLIC_ID}"


def test_render_qr_png_signature():
    assert render_qr_png("https://x.example/p/abc")[:4] == b"\x89PNG"


def test_generate_qr_code_nom_deterministe():
    with patch.object(asset_service, "render_qr_png", wraps=render_qr_png) as render:
        url = generate_qr_code(PUBLIC_ID, "https://x.example")

    assert url == f"/uploads/qrcodes/qr-{PUBLIC_ID}.png"
    render.assert_called_once_with(f"https://x.example/p/{PUBLIC_ID}")
    assert local_path(url).read_bytes()[:4] == b"\x89PNG"


def test_generate_qr_code_regeneration_ecrase():
    generate_qr_code(PUBLIC_ID, "https://old.example")
    generate_qr_code(PUBLIC_ID, "https://new.example")

    files = list((Path(settings.UPLOADS_DIR) / "qrcodes").iterdir())
    assert [f.name for f in files] == [f"qr-{PUBLIC_ID}.png"]


def test_generate_qr_code_echec_retourne_vide():
    with patch.object(asset_service, "render_qr_png", side_effect=RuntimeError("KO")):
        assert generate_qr_code(PUBLIC_ID, "https://x.example") == ""


# ============================================================
# delete_asset / ensure_upload_dirs
# ============================================================

def test_delete_asset_supprime():
    url = store_photo(b"data", "image/png")
    delete_asset(url)
    assert not local_path(url).exists()


def test_delete_asset_absent_sans_erreur():
    delete_asset("/uploads/photos/inexistant.png")


def test_delete_asset_url_vide_ou_externe():
    delete_asset("")
    delete_asset("https://cdn.example/photo.png")


def test_delete_asset_hors_repertoire_ignore():
    """Une URL qui sort du répertoire de stockage n'est jamais suivie."""
    outside = Path(settings.UPLOADS_DIR).parent / "secret.txt"
    outside.write_text("keep")

    delete_asset("/uploads/../secret.txt")

    assert outside.exists()


def test_ensure_upload_dirs():
    ensure_upload_dirs()
    assert (Path(settings.UPLOADS_DIR) / "photos").is_dir()
    assert (Path(settings.UPLOADS_DIR) / "qrcodes").is_dir()
