"""
Journal d'activité append-only : aucune mise à jour ni suppression.

performed_by n'est pas une clé étrangère : il contient soit l'id d'un
administrateur, soit la sentinelle "system" pour les actions automatiques.
"""

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, func

from passport_registry.database import Base

SYSTEM_PERFORMER = "system"


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(Text, nullable=False)
    entity_type = Column(String(50), nullable=False)  # group, passport, admin
    entity_id = Column(String(255), nullable=False)
    performed_by = Column(String(255), nullable=False, index=True)
    details = Column(JSON, nullable=True)
    timestamp = Column(DateTime, server_default=func.now(), nullable=False, index=True)
