"""
Schéma du rapport d'un passage du contrôle d'expiration.
"""

from datetime import date
from typing import List

from pydantic import BaseModel


class ExpirationReport(BaseModel):
    run_date: date
    checked: int = 0
    expired: int = 0
    errors: List[str] = []
    skipped: bool = False  # un passage était déjà en cours
