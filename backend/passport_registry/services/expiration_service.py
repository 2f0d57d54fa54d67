"""
Contrôle d'expiration des passeports.

Un passeport est expiré si son status est True et que sa date d'expiration est
strictement antérieure à aujourd'hui. Le jour est calculé dans le fuseau
TIMEZONE, celui du déclencheur planifié, et non dans celui du serveur.
Chaque passeport expiré passe par passport_service.mark_expired avec
l'auteur "system", ce qui garantit la même journalisation que pour une
action d'administrateur.

Un second passage le même jour ne fait aucune transition : les passeports déjà
inactifs sont écartés par le test sur status.
"""

import logging
import threading
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from passport_registry.config import settings
from passport_registry.models.activity_log import SYSTEM_PERFORMER
from passport_registry.models.person import Person
from passport_registry.schemas.expiration import ExpirationReport
from passport_registry.services import passport_service

logger = logging.getLogger(__name__)

# Empêche deux passages simultanés (déclencheur planifié + déclenchement manuel)
_run_lock = threading.Lock()


def local_today(now: Optional[datetime] = None) -> date:
    """Date du jour dans le fuseau TIMEZONE, indépendante du fuseau du serveur."""
    tz = ZoneInfo(settings.TIMEZONE)
    return (now.astimezone(tz) if now else datetime.now(tz)).date()


def is_expired(person: Person, today: date) -> bool:
    return bool(person.status) and person.expiration_date < today


def run_expiration_check(db: Session, today: Optional[date] = None) -> ExpirationReport:
    """
    Désactive tous les passeports expirés.
    Une erreur sur un passeport n'interrompt pas le traitement des suivants ;
    les erreurs sont rassemblées dans le rapport, jamais levées.
    """
    today = today or local_today()
    report = ExpirationReport(run_date=today)

    if not _run_lock.acquire(blocking=False):
        logger.warning("Contrôle d'expiration déjà en cours, passage ignoré.")
        report.skipped = True
        return report

    try:
        try:
            people = passport_service.get_people(db)
        except Exception as exc:
            logger.error("Chargement des passeports impossible : %s", exc)
            report.errors.append(f"Chargement des passeports : {exc}")
            return report

        # Instantané des valeurs : un rollback pendant la boucle expire les objets de la session
        candidates = [
            (person.id, person.full_name, person.expiration_date)
            for person in people
            if is_expired(person, today)
        ]
        report.checked = len(people)

        for person_id, full_name, expiration_date in candidates:
            try:
                passport_service.mark_expired(
                    db,
                    person_id,
                    SYSTEM_PERFORMER,
                    {"full_name": full_name, "expiration_date": expiration_date.isoformat()},
                )
            except Exception as exc:
                error_msg = f"Passeport {person_id} ({full_name}) : {exc}"
                report.errors.append(error_msg)
                logger.error("Échec de la désactivation automatique : %s", error_msg)
                continue
            report.expired += 1
            logger.info("Passeport %s (%s) marqué comme expiré", person_id, full_name)
    finally:
        _run_lock.release()

    logger.info(
        "Contrôle d'expiration du %s : %d passeports vérifiés, %d expirés, %d erreurs",
        today, report.checked, report.expired, len(report.errors),
    )
    return report
