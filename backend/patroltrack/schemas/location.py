"""
Schémas Pydantic pour le catalogue des points de ronde.
Le catalogue est figé au démarrage ; une ronde ne le modifie jamais.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

VALID_DEPARTMENTS = ("security", "housekeeping", "maintenance")


def validate_department(v: str) -> str:
    """Normalise et vérifie un département (security, housekeeping, maintenance)."""
    value = v.strip().lower()
    if value not in VALID_DEPARTMENTS:
        raise ValueError(f"Département invalide. Valeurs acceptées : {VALID_DEPARTMENTS}")
    return value


class Coordinates(BaseModel):
    """Position GPS (degrés décimaux)."""
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class PatrolLocation(BaseModel):
    """Point de ronde identifié par l'étiquette QR qui y est apposée."""
    id: str
    name: str
    code: str                                 # Texte encodé dans le QR, unique
    department: str                           # security, housekeeping, maintenance
    required_checks: List[str]                # Ordre d'affichage conservé
    coordinates: Optional[Coordinates] = None

    model_config = {"frozen": True}

    @field_validator("id", "name", "code")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Ce champ ne peut pas être vide.")
        return v.strip()

    @field_validator("department")
    @classmethod
    def valid_department(cls, v: str) -> str:
        return validate_department(v)

    @field_validator("required_checks")
    @classmethod
    def checks_not_empty(cls, v: List[str]) -> List[str]:
        checks = [c.strip() for c in v if c.strip()]
        if not checks:
            raise ValueError("Un point de ronde doit avoir au moins un contrôle.")
        if len(set(checks)) != len(checks):
            raise ValueError("Les contrôles d'un point de ronde doivent être uniques.")
        return checks


class LocationVisit(BaseModel):
    """Point du département d'une ronde, avec le nombre de passages enregistrés."""
    location: PatrolLocation
    checks_recorded: int
