"""
Tests unitaires pour le job d'éviction des rondes (terminées et abandonnées).
"""

from datetime import timedelta
from unittest.mock import MagicMock, patch

from patroltrack.config import settings
from patroltrack.scheduler import _evict_sessions


def test_eviction_appelle_le_service():
    service = MagicMock()
    service.evict_completed.return_value = 2
    service.evict_stale_active.return_value = 1

    with patch("patroltrack.services.patrol_service.get_patrol_service", return_value=service):
        _evict_sessions()

    service.evict_completed.assert_called_once_with(
        timedelta(minutes=settings.COMPLETED_SESSION_RETENTION_MINUTES)
    )
    service.evict_stale_active.assert_called_once_with(
        timedelta(minutes=settings.STALE_ACTIVE_SESSION_MINUTES)
    )


def test_erreur_du_job_journalisee_sans_propagation():
    service = MagicMock()
    service.evict_completed.side_effect = RuntimeError("boom")

    with patch("patroltrack.services.patrol_service.get_patrol_service", return_value=service):
        _evict_sessions()  # ne lève pas
