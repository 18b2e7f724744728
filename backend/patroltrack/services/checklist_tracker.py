"""
Suivi de la checklist du point en cours d'inspection.

Un seul point à la fois : chaque nouveau scan remplace l'état non soumis,
sans fusion (la checklist abandonnée est perdue).
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from patroltrack.exceptions import IncompleteChecklist
from patroltrack.schemas.checklist import ActiveChecklistState, LocationCheck
from patroltrack.schemas.location import Coordinates, PatrolLocation

logger = logging.getLogger(__name__)


class ChecklistTracker:
    def __init__(self):
        self.state = ActiveChecklistState()

    def initialize(self, location: PatrolLocation) -> ActiveChecklistState:
        """Charge le point scanné : tous les contrôles à False, photos et notes vidées."""
        if self.state.location is not None:
            logger.info(
                "Checklist non soumise abandonnée pour %s (nouveau scan : %s)",
                self.state.location.code, location.code,
            )
        self.state = ActiveChecklistState(
            location=location,
            checklist={check: False for check in location.required_checks},
        )
        return self.state

    def reset(self) -> None:
        self.state = ActiveChecklistState()

    def set_check_value(self, check_name: str, done: bool) -> None:
        """Coche/décoche un contrôle. Sans effet si le contrôle n'existe pas."""
        if check_name not in self.state.checklist:
            logger.debug("Contrôle inconnu ignoré : %r", check_name)
            return
        self.state.checklist[check_name] = bool(done)

    def add_images(self, images: List[str]) -> None:
        """Ajoute des photos à la suite (ordre conservé, pas de dédoublonnage)."""
        self.state.captured_images.extend(images)

    def set_notes(self, notes: str) -> None:
        self.state.notes = notes or ""

    def missing_requirements(self) -> Tuple[List[str], bool]:
        """Contrôles non cochés et absence de photo."""
        unchecked = [name for name, done in self.state.checklist.items() if not done]
        return unchecked, not self.state.captured_images

    def is_ready_to_submit(self) -> bool:
        if self.state.location is None:
            return False
        unchecked, missing_images = self.missing_requirements()
        return not unchecked and not missing_images

    def build_location_check(
        self,
        session_id: str,
        coordinates: Optional[Coordinates] = None,
    ) -> LocationCheck:
        """
        Construit la vérification du point courant. L'état reste chargé
        jusqu'à ce que l'appelant ait enregistré la vérification (reset()).

        Lève IncompleteChecklist si un contrôle n'est pas coché
        ou si aucune photo n'est jointe.
        """
        if not self.is_ready_to_submit():
            unchecked, missing_images = self.missing_requirements()
            raise IncompleteChecklist(unchecked, missing_images)

        location = self.state.location
        notes = self.state.notes.strip()
        check = LocationCheck(
            session_id=session_id,
            location_id=location.id,
            location_code=location.code,
            checked_at=datetime.now(timezone.utc),
            checklist_completed=True,
            evidence_images=list(self.state.captured_images),
            notes=notes or None,
            coordinates=coordinates,
        )
        return check
