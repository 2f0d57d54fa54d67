"""
Tests d'intégration API pour les administrateurs et le contrôle d'expiration manuel.
"""

from datetime import date
from unittest.mock import patch

from conftest import make_user

from passport_registry.errors import ConflictError
from passport_registry.schemas.expiration import ExpirationReport


def test_auth_user(client):
    response = client.get("/api/auth/user")
    assert response.status_code == 200
    assert response.json()["id"] == "admin-1"
    assert response.json()["is_main_admin"] is True


def test_auth_user_non_authentifie(anon_client):
    assert anon_client.get("/api/auth/user").status_code == 401


def test_list_admins_admin_principal(client):
    with patch("passport_registry.routers.admins.admin_service.get_admins") as mock:
        mock.return_value = [make_user(), make_user(user_id="admin-2", is_main_admin=False)]
        response = client.get("/api/admins")

    assert response.status_code == 200
    assert len(response.json()) == 2


def test_list_admins_refuse_non_principal(regular_client):
    with patch("passport_registry.routers.admins.admin_service.get_admins") as mock:
        response = regular_client.get("/api/admins")

    assert response.status_code == 403
    mock.assert_not_called()


def test_update_admin_status(client):
    with patch("passport_registry.routers.admins.admin_service.set_admin_active") as mock:
        mock.return_value = make_user(user_id="admin-2", is_main_admin=False, is_active=False)
        response = client.put("/api/admins/admin-2", json={"is_active": False})

    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert mock.call_args.args[1:3] == ("admin-2", False)
    assert mock.call_args.kwargs["performed_by"] == "admin-1"


def test_update_admin_status_refuse_non_principal(regular_client):
    """Administrateur non principal → 403, le compte cible n'est pas modifié."""
    with patch("passport_registry.routers.admins.admin_service.set_admin_active") as mock:
        response = regular_client.put("/api/admins/admin-3", json={"is_active": False})

    assert response.status_code == 403
    mock.assert_not_called()


def test_update_admin_status_dernier_principal(client):
    with patch("passport_registry.routers.admins.admin_service.set_admin_active") as mock:
        mock.side_effect = ConflictError("Невозможно деактивировать последнего главного администратора.")
        response = client.put("/api/admins/admin-1", json={"is_active": False})

    assert response.status_code == 409


def test_update_admin_status_body_invalide(client):
    response = client.put("/api/admins/admin-2", json={"is_active": "peut-être"})
    assert response.status_code == 422


def test_expiration_check_manuel(client):
    with patch("passport_registry.routers.admins.expiration_service.run_expiration_check") as mock:
        mock.return_value = ExpirationReport(run_date=date(2026, 3, 10), checked=4, expired=1)
        response = client.post("/api/admin/expiration-check")

    assert response.status_code == 200
    assert response.json()["expired"] == 1


def test_expiration_check_refuse_non_principal(regular_client):
    with patch("passport_registry.routers.admins.expiration_service.run_expiration_check") as mock:
        response = regular_client.post("/api/admin/expiration-check")

    assert response.status_code == 403
    mock.assert_not_called()
