"""
Modèle SQLAlchemy pour les groupes (départements) regroupant des passeports.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from passport_registry.database import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)  # unicité non imposée
    created_by = Column(String(255), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
