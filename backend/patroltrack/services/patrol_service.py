"""
Service d'orchestration des rondes QR.

Flux :
  1. L'opérateur démarre une ronde pour un département
  2. Il scanne l'étiquette d'un point → checklist initialisée (l'état non soumis est perdu)
  3. Il coche les contrôles, joint au moins une photo, ajoute des notes
  4. La soumission construit la vérification, l'enregistre, fait progresser la ronde
  5. La ronde se clôture d'elle-même au dernier point

L'état des rondes en cours vit en mémoire, une entrée par ronde ;
seules les vérifications et les rondes terminées partent au puits de persistance.
"""

import logging
import threading
from collections import Counter
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, Iterable, List, Optional

from patroltrack.config import settings
from patroltrack.database import SessionLocal
from patroltrack.exceptions import SessionNotActive, SessionNotFound
from patroltrack.schemas.checklist import (
    ChecklistResponse,
    LocationCheck,
    LocationCheckResponse,
    SubmitResponse,
)
from patroltrack.schemas.location import Coordinates, LocationVisit
from patroltrack.schemas.session import SESSION_ACTIVE, SESSION_COMPLETED, PatrolSession, SessionResponse
from patroltrack.services import evidence_capture
from patroltrack.services.checklist_tracker import ChecklistTracker
from patroltrack.services.geolocation import GeolocationProvider, capture_coordinates
from patroltrack.services.location_registry import LocationRegistry, load_registry
from patroltrack.services.persistence import (
    DatabasePersistenceSink,
    InMemoryPersistenceSink,
    PersistenceSink,
)
from patroltrack.services.scan_decoder import ScanDecoder
from patroltrack.services.session_manager import SessionManager

logger = logging.getLogger(__name__)


class _PatrolRun:
    """Ronde en mémoire : session, checklist courante et passages par point."""

    def __init__(self, session: PatrolSession):
        self.session = session
        self.tracker = ChecklistTracker()
        self.visits: Counter = Counter()
        self.last_activity = datetime.now(timezone.utc)


class PatrolService:
    def __init__(
        self,
        registry: LocationRegistry,
        sink: PersistenceSink,
        geolocation_timeout: float = 5.0,
    ):
        self.registry = registry
        self.sink = sink
        self.decoder = ScanDecoder(registry)
        self.sessions = SessionManager(registry, sink)
        self._geolocation_timeout = geolocation_timeout
        self._runs: Dict[str, _PatrolRun] = {}
        self._lock = threading.RLock()

    # ----------------------------------------------------------------
    # Sessions
    # ----------------------------------------------------------------

    def start_session(self, department: str, operator_id: str) -> SessionResponse:
        session = self.sessions.start(department, operator_id)
        with self._lock:
            self._runs[session.id] = _PatrolRun(session)
        return self._session_response(session)

    def get_session(self, session_id: str) -> SessionResponse:
        with self._lock:
            return self._session_response(self._get_run(session_id).session)

    def list_session_locations(self, session_id: str) -> List[LocationVisit]:
        """Points du département de la ronde, avec le nombre de vérifications de chacun."""
        with self._lock:
            run = self._get_run(session_id)
            return [
                LocationVisit(location=loc, checks_recorded=run.visits[loc.id])
                for loc in self.registry.list_by_department(run.session.department)
            ]

    # ----------------------------------------------------------------
    # Checklist du point courant
    # ----------------------------------------------------------------

    def scan(self, session_id: str, raw_code) -> ChecklistResponse:
        """
        Traite un texte scanné : résout le point et (ré)initialise la checklist.

        Lève SessionNotActive si la ronde est terminée, UnknownLocation ou
        DepartmentMismatch si le scan est rejeté (aucun état modifié).
        """
        with self._lock:
            run = self._get_active_run(session_id)
            location = self.decoder.resolve(raw_code, run.session.department)
            run.tracker.initialize(location)
            logger.info("Ronde %s : point scanné %s (%s)", session_id, location.code, location.name)
            return self._checklist_response(run)

    def get_checklist(self, session_id: str) -> ChecklistResponse:
        with self._lock:
            return self._checklist_response(self._get_run(session_id))

    def set_check_value(self, session_id: str, check_name: str, done: bool) -> ChecklistResponse:
        with self._lock:
            run = self._get_active_run(session_id)
            run.tracker.set_check_value(check_name, done)
            return self._checklist_response(run)

    def set_notes(self, session_id: str, notes: str) -> ChecklistResponse:
        with self._lock:
            run = self._get_active_run(session_id)
            run.tracker.set_notes(notes)
            return self._checklist_response(run)

    def add_images(self, session_id: str, raw_files: Iterable) -> ChecklistResponse:
        """Ajoute les photos valides du lot ; les fichiers non image sont ignorés."""
        images = evidence_capture.capture(raw_files)
        with self._lock:
            run = self._get_active_run(session_id)
            if run.tracker.state.location is None:
                logger.debug("Ronde %s : photos reçues sans point scanné, ignorées", session_id)
            elif images:
                run.tracker.add_images(images)
                logger.info(
                    "Ronde %s : %d photo(s) ajoutée(s) pour %s",
                    session_id, len(images), run.tracker.state.location.code,
                )
            return self._checklist_response(run)

    def submit(
        self,
        session_id: str,
        coordinates: Optional[Coordinates] = None,
        geolocation: Optional[GeolocationProvider] = None,
    ) -> SubmitResponse:
        """
        Termine la vérification du point courant.

        Coordonnées : celles fournies par le client, sinon le fournisseur de
        géolocalisation (délai borné, None en cas d'échec).

        Lève IncompleteChecklist si un contrôle manque ou sans photo,
        SessionNotActive si la ronde est terminée.
        """
        if coordinates is None:
            coordinates = capture_coordinates(geolocation, self._geolocation_timeout)

        with self._lock:
            run = self._get_active_run(session_id)
            check = run.tracker.build_location_check(session_id, coordinates)
            session = self.sessions.record_check(run.session, check)
            run.tracker.reset()
            run.visits[check.location_id] += 1

            return SubmitResponse(
                check=self._check_response(check),
                session=self._session_response(session),
            )

    # ----------------------------------------------------------------
    # Maintenance
    # ----------------------------------------------------------------

    def evict_completed(self, older_than: timedelta) -> int:
        """Retire de la mémoire les rondes terminées depuis plus de older_than."""
        cutoff = datetime.now(timezone.utc) - older_than
        with self._lock:
            expired = [
                sid for sid, run in self._runs.items()
                if run.session.status == SESSION_COMPLETED
                and run.session.ended_at is not None
                and run.session.ended_at <= cutoff
            ]
            for sid in expired:
                del self._runs[sid]
        return len(expired)

    def evict_stale_active(self, idle_for: timedelta) -> int:
        """Retire de la mémoire les rondes actives sans aucune action depuis idle_for."""
        cutoff = datetime.now(timezone.utc) - idle_for
        with self._lock:
            stale = [
                sid for sid, run in self._runs.items()
                if run.session.status == SESSION_ACTIVE and run.last_activity <= cutoff
            ]
            for sid in stale:
                del self._runs[sid]
        for sid in stale:
            logger.warning("Ronde %s abandonnée, retirée de la mémoire", sid)
        return len(stale)

    # ----------------------------------------------------------------
    # Helpers
    # ----------------------------------------------------------------

    def _get_run(self, session_id: str) -> _PatrolRun:
        run = self._runs.get(session_id)
        if run is None:
            raise SessionNotFound(session_id)
        return run

    def _get_active_run(self, session_id: str) -> _PatrolRun:
        run = self._get_run(session_id)
        if run.session.status != SESSION_ACTIVE:
            raise SessionNotActive(session_id, run.session.status)
        run.last_activity = datetime.now(timezone.utc)
        return run

    def _session_response(self, session: PatrolSession) -> SessionResponse:
        return SessionResponse(
            **session.model_dump(),
            progress_percentage=self.sessions.progress_percentage(session),
        )

    @staticmethod
    def _checklist_response(run: _PatrolRun) -> ChecklistResponse:
        state = run.tracker.state
        unchecked, _ = run.tracker.missing_requirements()
        return ChecklistResponse(
            session_id=run.session.id,
            location=state.location,
            checklist=dict(state.checklist),
            images_count=len(state.captured_images),
            notes=state.notes,
            ready_to_submit=run.tracker.is_ready_to_submit(),
            unchecked=unchecked,
        )

    @staticmethod
    def _check_response(check: LocationCheck) -> LocationCheckResponse:
        return LocationCheckResponse(
            id=check.id,
            session_id=check.session_id,
            location_id=check.location_id,
            location_code=check.location_code,
            checked_at=check.checked_at,
            checklist_completed=check.checklist_completed,
            images_count=len(check.evidence_images),
            notes=check.notes,
            coordinates=check.coordinates,
        )


def build_sink() -> PersistenceSink:
    """Puits de persistance selon PERSISTENCE_BACKEND (database ou memory)."""
    if settings.PERSISTENCE_BACKEND == "memory":
        return InMemoryPersistenceSink()
    return DatabasePersistenceSink(SessionLocal)


@lru_cache
def get_patrol_service() -> PatrolService:
    """Dépendance FastAPI — instance unique du service, construite au premier appel."""
    return PatrolService(
        registry=load_registry(settings.PATROL_LOCATIONS_FILE),
        sink=build_sink(),
        geolocation_timeout=settings.GEOLOCATION_TIMEOUT_SECONDS,
    )
