"""
Configuration de la connexion à la base de données PostgreSQL.
Utilise SQLAlchemy avec des sessions synchrones.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from passport_registry.config import settings
from passport_registry.errors import StorageError, StorageUnavailableError

logger = logging.getLogger(__name__)

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Dépendance FastAPI : fournit une session BDD et la ferme après usage."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db: Session):
    """
    Traduit les erreurs SQLAlchemy en StorageError après rollback de la session.
    Une base injoignable (connexion refusée, endpoint désactivé) devient
    StorageUnavailableError pour que l'opérateur sache quoi corriger.
    """
    try:
        yield
    except (OperationalError, DBAPIError) as exc:
        db.rollback()
        if isinstance(exc, OperationalError) or exc.connection_invalidated:
            logger.error("Base de données injoignable : %s", exc)
            raise StorageUnavailableError() from exc
        logger.error("Erreur base de données : %s", exc)
        raise StorageError() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Erreur base de données : %s", exc)
        raise StorageError() from exc
