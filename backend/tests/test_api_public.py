"""
Tests de la consultation publique d'un passeport et des fichiers servis sous /uploads.
"""

from unittest.mock import patch

from test_api_people import make_person

from passport_registry.auth import get_current_user, get_identity_resolver


def test_public_person_sans_authentification(anon_client):
    """La page publique ne passe jamais par la résolution d'identité."""
    with patch("passport_registry.routers.public.passport_service.get_person_by_public_id") as mock:
        mock.return_value = make_person(public_id="ab" * 16)
        response = anon_client.get(f"/api/public/people/{'ab' * 16}")

    assert response.status_code == 200
    assert response.json()["public_id"] == "ab" * 16
    mock.assert_called_once()


def test_public_person_introuvable(anon_client):
    with patch("passport_registry.routers.public.passport_service.get_person_by_public_id") as mock:
        mock.return_value = None
        response = anon_client.get("/api/public/people/inconnu")

    assert response.status_code == 404


def test_public_route_sans_dependance_identite():
    from passport_registry.routers.public import router

    for route in router.routes:
        dependencies = {d.call for d in route.dependant.dependencies}
        assert get_current_user not in dependencies
        assert get_identity_resolver not in dependencies


def test_uploads_cors_permissif(client):
    response = client.get("/uploads/photos/inexistant.png")
    assert response.headers["access-control-allow-origin"] == "*"


def test_health(client):
    assert client.get("/api/health").json()["status"] == "ok"
