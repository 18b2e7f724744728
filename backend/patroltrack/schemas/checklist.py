"""
Schémas Pydantic pour la vérification d'un point de ronde.
Couvre l'état transitoire de la checklist et la vérification enregistrée.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from patroltrack.schemas.location import Coordinates, PatrolLocation
from patroltrack.schemas.session import SessionResponse


class ActiveChecklistState(BaseModel):
    """
    État transitoire, non persisté, du point en cours d'inspection.
    Réinitialisé à chaque nouveau scan ; l'état non soumis est perdu.
    """
    location: Optional[PatrolLocation] = None
    checklist: Dict[str, bool] = Field(default_factory=dict)
    captured_images: List[str] = Field(default_factory=list)
    notes: str = ""


class LocationCheck(BaseModel):
    """Vérification complète d'un point, rattachée à une seule ronde. Immuable."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str
    location_id: str
    location_code: str
    checked_at: datetime
    checklist_completed: bool
    evidence_images: List[str]           # Data-URIs, dans l'ordre de capture
    notes: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    model_config = {"frozen": True}

    @field_validator("evidence_images")
    @classmethod
    def at_least_one_image(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("Une vérification sans photo ne peut pas être enregistrée.")
        return v


class ScanRequest(BaseModel):
    """Texte décodé par le lecteur QR côté client."""
    raw_code: Any = None


class CheckItemUpdate(BaseModel):
    """Coche ou décoche un contrôle de la checklist courante."""
    check_name: str
    done: bool = True


class NotesUpdate(BaseModel):
    notes: str = ""


class SubmitRequest(BaseModel):
    """Coordonnées facultatives relevées par le client au moment de la soumission."""
    coordinates: Optional[Coordinates] = None


class ChecklistResponse(BaseModel):
    """État courant de la checklist renvoyé au client (sans le contenu des images)."""
    session_id: str
    location: Optional[PatrolLocation]
    checklist: Dict[str, bool]
    images_count: int
    notes: str
    ready_to_submit: bool
    unchecked: List[str]


class LocationCheckResponse(BaseModel):
    """Résumé d'une vérification enregistrée."""
    id: str
    session_id: str
    location_id: str
    location_code: str
    checked_at: datetime
    checklist_completed: bool
    images_count: int
    notes: Optional[str]
    coordinates: Optional[Coordinates]


class SubmitResponse(BaseModel):
    """Résultat d'une soumission : la vérification et la ronde mise à jour."""
    check: LocationCheckResponse
    session: SessionResponse
