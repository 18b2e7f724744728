"""
Schémas Pydantic pour les sessions de ronde.
Une session couvre un opérateur et un département, de start() à la clôture automatique.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from patroltrack.schemas.location import validate_department

SESSION_ACTIVE = "active"
SESSION_COMPLETED = "completed"


class PatrolSession(BaseModel):
    """
    Ronde en cours ou terminée.

    Invariant : status == completed si et seulement si
    completed_locations == total_locations et ended_at est renseigné.
    """
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    operator_id: str
    department: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    total_locations: int
    completed_locations: int = 0
    status: str = SESSION_ACTIVE  # active, completed


class SessionStart(BaseModel):
    """Données nécessaires pour démarrer une ronde."""
    department: str
    operator_id: str  # Fourni par le fournisseur d'identité, opaque

    @field_validator("department")
    @classmethod
    def valid_department(cls, v: str) -> str:
        return validate_department(v)

    @field_validator("operator_id")
    @classmethod
    def operator_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("L'identifiant opérateur ne peut pas être vide.")
        return v.strip()


class SessionResponse(BaseModel):
    """Session renvoyée au client, avec le pourcentage de progression."""
    id: str
    operator_id: str
    department: str
    started_at: datetime
    ended_at: Optional[datetime]
    total_locations: int
    completed_locations: int
    status: str
    progress_percentage: float
