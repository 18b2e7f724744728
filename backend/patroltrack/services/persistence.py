"""
Puits de persistance des rondes.

Le gestionnaire de session l'appelle une fois par vérification enregistrée ;
la vérification qui clôture la ronde part avec la ronde dans un seul appel
(save_completion), pour qu'un échec n'en laisse aucune des deux écrite.

Deux implémentations :
- DatabasePersistenceSink : écrit via SQLAlchemy (une session BDD et un commit par appel)
- InMemoryPersistenceSink : conserve en mémoire (tests, démo sans base)
"""

import logging
import threading
from typing import Callable, List

from sqlalchemy.orm import Session

from patroltrack.models.location_check import LocationCheckRecord
from patroltrack.models.patrol_session import PatrolSessionRecord
from patroltrack.schemas.checklist import LocationCheck
from patroltrack.schemas.session import PatrolSession

logger = logging.getLogger(__name__)


class PersistenceSink:
    """Interface du stockage durable des vérifications et des rondes."""

    def save_location_check(self, check: LocationCheck) -> None:
        raise NotImplementedError

    def save_session(self, session: PatrolSession) -> None:
        raise NotImplementedError

    def save_completion(self, check: LocationCheck, session: PatrolSession) -> None:
        """Dernière vérification et ronde finalisée, tout ou rien."""
        raise NotImplementedError


class InMemoryPersistenceSink(PersistenceSink):
    def __init__(self):
        self._lock = threading.Lock()
        self.checks: List[LocationCheck] = []
        self.sessions: List[PatrolSession] = []

    def save_location_check(self, check: LocationCheck) -> None:
        with self._lock:
            self.checks.append(check)

    def save_session(self, session: PatrolSession) -> None:
        with self._lock:
            self.sessions.append(session.model_copy())

    def save_completion(self, check: LocationCheck, session: PatrolSession) -> None:
        with self._lock:
            self.checks.append(check)
            self.sessions.append(session.model_copy())


class DatabasePersistenceSink(PersistenceSink):
    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def save_location_check(self, check: LocationCheck) -> None:
        """Insère la vérification (append-only) et commite."""
        self._write(lambda db: db.add(_check_record(check)))
        logger.debug("Vérification %s persistée (ronde %s)", check.id, check.session_id)

    def save_session(self, session: PatrolSession) -> None:
        """Écrit la ronde finalisée (merge : idempotent sur l'id)."""
        self._write(lambda db: db.merge(_session_record(session)))
        logger.debug("Ronde %s persistée (statut %s)", session.id, session.status)

    def save_completion(self, check: LocationCheck, session: PatrolSession) -> None:
        """Dernière vérification + ronde finalisée dans une seule transaction."""
        def write(db: Session) -> None:
            db.add(_check_record(check))
            db.merge(_session_record(session))

        self._write(write)
        logger.debug("Ronde %s clôturée et persistée avec la vérification %s", session.id, check.id)

    def _write(self, operation: Callable[[Session], None]) -> None:
        """Exécute l'écriture et commite ; rollback si quoi que ce soit échoue."""
        db = self._session_factory()
        try:
            operation(db)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def _check_record(check: LocationCheck) -> LocationCheckRecord:
    return LocationCheckRecord(
        id=check.id,
        session_id=check.session_id,
        location_id=check.location_id,
        location_code=check.location_code,
        checked_at=check.checked_at,
        checklist_completed=check.checklist_completed,
        evidence_images=list(check.evidence_images),
        notes=check.notes,
        latitude=check.coordinates.lat if check.coordinates else None,
        longitude=check.coordinates.lng if check.coordinates else None,
    )


def _session_record(session: PatrolSession) -> PatrolSessionRecord:
    return PatrolSessionRecord(
        id=session.id,
        operator_id=session.operator_id,
        department=session.department,
        started_at=session.started_at,
        ended_at=session.ended_at,
        total_locations=session.total_locations,
        completed_locations=session.completed_locations,
        status=session.status,
    )
