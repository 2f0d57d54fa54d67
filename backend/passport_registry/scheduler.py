"""
Planificateur APScheduler pour la désactivation automatique des passeports expirés.

Le job s'exécute une fois par jour à EXPIRATION_CHECK_HOUR:EXPIRATION_CHECK_MINUTE
dans le fuseau TIMEZONE et passe à status=False les passeports dont la date
d'expiration est dépassée.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from passport_registry.config import settings
from passport_registry.database import SessionLocal

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()

JOB_ID = "passport_expiration_check"


def _check_expired_passports() -> None:
    """
    Tâche planifiée : ouvre sa propre session et lance le contrôle d'expiration.
    Aucune exception ne remonte au planificateur.
    Import local pour éviter les imports circulaires.
    """
    from passport_registry.services.expiration_service import run_expiration_check

    logger.info("Lancement du contrôle d'expiration des passeports...")
    db = SessionLocal()
    try:
        report = run_expiration_check(db)
        if report.errors:
            logger.error(
                "Contrôle d'expiration terminé avec %d erreur(s) : %s",
                len(report.errors), "; ".join(report.errors),
            )
    except Exception as exc:
        logger.error("Erreur lors du contrôle d'expiration : %s", exc, exc_info=True)
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _check_expired_passports,
        trigger=CronTrigger(
            hour=settings.EXPIRATION_CHECK_HOUR,
            minute=settings.EXPIRATION_CHECK_MINUTE,
            timezone=settings.TIMEZONE,
        ),
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler démarré, contrôle d'expiration chaque jour à %02d:%02d (%s).",
        settings.EXPIRATION_CHECK_HOUR, settings.EXPIRATION_CHECK_MINUTE, settings.TIMEZONE,
    )


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
