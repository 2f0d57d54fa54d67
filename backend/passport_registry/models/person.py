"""
Modèle SQLAlchemy pour les passeports.

public_id : jeton aléatoire (32 caractères hexadécimaux) utilisé dans le lien
public et le QR code. Généré une seule fois à la création, jamais modifié.
status : True = valide, False = expiré ou révoqué.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, func

from passport_registry.database import Base


class Person(Base):
    __tablename__ = "people"

    id = Column(Integer, primary_key=True, autoincrement=True)
    public_id = Column(String(64), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    birth_date = Column(Date, nullable=False)
    passport_number = Column(String(100), nullable=False)
    expiration_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=False, default="")
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False)
    status = Column(Boolean, nullable=False, default=True)
    photo_url = Column(String(500), nullable=False, default="")
    qr_code_url = Column(String(500), nullable=False, default="")
    created_by = Column(String(255), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
