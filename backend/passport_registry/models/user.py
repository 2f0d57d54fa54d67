"""
Modèle SQLAlchemy pour les administrateurs.
L'identifiant est le `sub` fourni par le fournisseur d'identité.
Un administrateur n'est jamais supprimé, seulement désactivé.
"""

from sqlalchemy import Boolean, Column, DateTime, String, func

from passport_registry.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    email = Column(String(255), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_image_url = Column(String(500), nullable=True)
    is_main_admin = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
