"""
Planificateur APScheduler pour l'éviction des rondes en mémoire.

Les rondes terminées sont déjà persistées : le job les retire de la mémoire
du service une fois la durée de rétention écoulée. Les rondes restées actives
sans aucune action depuis STALE_ACTIVE_SESSION_MINUTES sont considérées
abandonnées et retirées aussi (leurs vérifications déjà soumises restent en base).
"""

import logging
from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler

from patroltrack.config import settings

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def _evict_sessions() -> None:
    """
    Tâche planifiée : retire les rondes terminées depuis plus de
    COMPLETED_SESSION_RETENTION_MINUTES, puis les rondes actives abandonnées.
    Import local pour éviter les imports circulaires.
    """
    from patroltrack.services.patrol_service import get_patrol_service

    try:
        service = get_patrol_service()
        evicted = service.evict_completed(
            timedelta(minutes=settings.COMPLETED_SESSION_RETENTION_MINUTES)
        )
        if evicted:
            logger.info("%d ronde(s) terminée(s) retirée(s) de la mémoire", evicted)
        stale = service.evict_stale_active(
            timedelta(minutes=settings.STALE_ACTIVE_SESSION_MINUTES)
        )
        if stale:
            logger.info("%d ronde(s) abandonnée(s) retirée(s) de la mémoire", stale)
    except Exception as exc:
        logger.error("Erreur lors de l'éviction des rondes : %s", exc)


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _evict_sessions,
        trigger="interval",
        minutes=settings.EVICTION_INTERVAL_MINUTES,
        id="sessions_eviction",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler démarré, éviction des rondes toutes les %d minutes.",
        settings.EVICTION_INTERVAL_MINUTES,
    )


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler arrêté.")
