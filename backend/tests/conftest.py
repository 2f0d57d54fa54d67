"""
Configuration partagée pour tous les tests.

- client / regular_client / anon_client : BDD mockée (MagicMock) et identité forcée,
  aucune connexion réelle à PostgreSQL.
- db_session : base SQLite en mémoire pour les tests des services.
- sqlite_client : API complète branchée sur db_session (scénarios de bout en bout).
Les fichiers déposés sont écrits dans un répertoire temporaire.
"""

from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import passport_registry.models  # noqa: F401
from passport_registry.auth import get_current_user, get_identity_resolver
from passport_registry.config import settings
from passport_registry.database import Base, get_db
from passport_registry.main import app
from passport_registry.models.group import Group
from passport_registry.models.user import User


def make_user(user_id="admin-1", is_main_admin=True, is_active=True, email="admin@example.com") -> User:
    u = MagicMock(spec=User)
    u.id = user_id
    u.email = email
    u.first_name = "Иван"
    u.last_name = "Петров"
    u.profile_image_url = None
    u.is_main_admin = is_main_admin
    u.is_active = is_active
    u.created_at = datetime.now()
    u.updated_at = datetime.now()
    return u


@pytest.fixture(autouse=True)
def test_settings(tmp_path, monkeypatch):
    """Scheduler désactivé, fuseau fixé et fichiers écrits dans tmp_path."""
    monkeypatch.setattr(settings, "SCHEDULER_ENABLED", False)
    monkeypatch.setattr(settings, "TIMEZONE", "Europe/Moscow")
    monkeypatch.setattr(settings, "UPLOADS_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "https://passports.example.com")
    monkeypatch.setattr(settings, "MAIN_ADMIN_EMAILS", ["boss@example.com"])
    return settings


def _client_for(user):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_current_user] = lambda: user
    return TestClient(app)


@pytest.fixture
def client():
    """Client HTTP de test : BDD mockée, administrateur principal authentifié."""
    with _client_for(make_user()) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def regular_client():
    """Client HTTP de test : administrateur actif mais non principal."""
    with _client_for(make_user(user_id="admin-2", is_main_admin=False)) as c:
        yield c
    app.dependency_overrides.clear()


class _NoIdentityResolver:
    def resolve(self, request):
        return None


@pytest.fixture
def anon_client():
    """Client HTTP de test sans identité (requête non authentifiée)."""
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    app.dependency_overrides[get_identity_resolver] = lambda: _NoIdentityResolver()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Session SQLAlchemy sur une base SQLite en mémoire, schéma complet créé."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def admin(db_session) -> User:
    user = User(id="admin-1", email="admin@example.com", first_name="Иван", last_name="Петров",
                is_main_admin=True, is_active=True)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def group(db_session, admin) -> Group:
    g = Group(name="Отдел A", created_by=admin.id)
    db_session.add(g)
    db_session.commit()
    return g


@pytest.fixture
def sqlite_client(db_session, admin):
    """API complète sur la base SQLite, authentifiée en tant que `admin`."""
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: admin
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
