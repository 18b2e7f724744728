"""
Gestionnaire du cycle de vie des rondes.

Machine à états :
    start() → active ──record_check()──▶ active ──record_check() (N-ième)──▶ completed

`completed` est terminal. Il n'existe pas de commande « terminer » :
la clôture est toujours l'effet du N-ième record_check, avant le retour à l'appelant.
"""

import logging
import threading
from datetime import datetime, timezone

from patroltrack.exceptions import (
    DepartmentMismatch,
    NoLocationsForDepartment,
    PatrolError,
    SessionNotActive,
    UnknownLocation,
)
from patroltrack.schemas.checklist import LocationCheck
from patroltrack.schemas.session import SESSION_ACTIVE, SESSION_COMPLETED, PatrolSession
from patroltrack.services.location_registry import LocationRegistry
from patroltrack.services.persistence import PersistenceSink

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(self, registry: LocationRegistry, sink: PersistenceSink):
        self._registry = registry
        self._sink = sink
        # Sérialise record_check : deux soumissions ne peuvent pas double-incrémenter
        self._lock = threading.Lock()

    def start(self, department: str, operator_id: str) -> PatrolSession:
        """
        Démarre une ronde pour un département.

        total_locations = nombre de points du département dans le catalogue.
        Lève NoLocationsForDepartment si ce nombre est nul.
        """
        total = len(self._registry.list_by_department(department))
        if total == 0:
            raise NoLocationsForDepartment(department)

        session = PatrolSession(
            operator_id=operator_id,
            department=department,
            started_at=datetime.now(timezone.utc),
            total_locations=total,
        )
        logger.info(
            "Ronde %s démarrée (%s, opérateur %s, %d points)",
            session.id, department, operator_id, total,
        )
        return session

    def record_check(self, session: PatrolSession, location_check: LocationCheck) -> PatrolSession:
        """
        Enregistre une vérification et fait progresser la ronde de 1.

        Chaque appel réussi compte, même si le point a déjà été vérifié dans
        cette ronde. La vérification est revalidée ici (ronde, point, département) :
        une vérification produite hors du flux de scan n'est jamais acceptée telle quelle.

        Lève SessionNotActive si la ronde est terminée, UnknownLocation si le point
        n'existe pas, DepartmentMismatch s'il appartient à un autre département.
        """
        with self._lock:
            if session.status != SESSION_ACTIVE:
                raise SessionNotActive(session.id, session.status)
            if location_check.session_id != session.id:
                raise PatrolError(
                    f"La vérification appartient à la ronde {location_check.session_id}, "
                    f"pas à la ronde {session.id}."
                )

            location = self._registry.find_by_id(location_check.location_id)
            if location is None:
                raise UnknownLocation(location_check.location_code)
            if location.department != session.department:
                raise DepartmentMismatch(location.department, session.department)

            completed = session.completed_locations + 1
            updated = session.model_copy(update={"completed_locations": completed})
            if completed >= session.total_locations:
                updated.status = SESSION_COMPLETED
                updated.ended_at = datetime.now(timezone.utc)

            # Persistance avant mutation : un échec d'écriture laisse la ronde intacte.
            # Au dernier point, vérification et ronde partent dans la même transaction.
            if updated.status == SESSION_COMPLETED:
                self._sink.save_completion(location_check, updated)
            else:
                self._sink.save_location_check(location_check)

            session.completed_locations = updated.completed_locations
            session.status = updated.status
            session.ended_at = updated.ended_at
            logger.info(
                "Ronde %s : %s vérifié (%d/%d)",
                session.id, location.code, completed, session.total_locations,
            )
            if session.status == SESSION_COMPLETED:
                logger.info("Ronde %s terminée à %s", session.id, session.ended_at.isoformat())

            return session

    @staticmethod
    def progress_percentage(session: PatrolSession) -> float:
        """Progression en pourcentage, 0 si la ronde n'a aucun point."""
        if session.total_locations == 0:
            return 0.0
        return min(session.completed_locations / session.total_locations * 100, 100.0)
