"""
Erreurs métier du flux de ronde (scan → checklist → photos → clôture).

Toutes héritent de ValueError, comme les erreurs levées par les services :
les routers les traduisent en HTTPException. Aucune ne modifie l'état.
"""

from typing import List, Optional


class PatrolError(ValueError):
    """Base des rejets de validation d'une ronde."""


class UnknownLocation(PatrolError):
    """Le code scanné ne correspond à aucun point du catalogue."""

    def __init__(self, code: Optional[str]):
        self.code = code
        super().__init__(f"Point de ronde introuvable pour le code {code!r}.")


class DepartmentMismatch(PatrolError):
    """Le point scanné appartient à un autre département que la ronde."""

    def __init__(self, location_department: str, expected_department: str):
        self.location_department = location_department
        self.expected_department = expected_department
        super().__init__(
            f"Ce point est réservé aux rondes {location_department} ; "
            f"la ronde en cours est de type {expected_department}."
        )


class IncompleteChecklist(PatrolError):
    """Soumission tentée avant que toutes les conditions soient remplies."""

    def __init__(self, unchecked: List[str], missing_images: bool):
        self.unchecked = list(unchecked)
        self.missing_images = missing_images
        reasons = []
        if unchecked:
            reasons.append("points non cochés : " + ", ".join(unchecked))
        if missing_images:
            reasons.append("au moins une photo est requise")
        if not reasons:
            reasons.append("aucun point de ronde chargé")
        super().__init__("Checklist incomplète : " + " ; ".join(reasons) + ".")


class SessionNotActive(PatrolError):
    """Enregistrement tenté sur une ronde terminée."""

    def __init__(self, session_id: str, status: str):
        self.session_id = session_id
        self.status = status
        super().__init__(f"La ronde {session_id} n'est plus active (statut {status}).")


class SessionNotFound(PatrolError):
    """Aucune ronde connue pour cet identifiant."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Ronde {session_id} introuvable.")


class NoLocationsForDepartment(PatrolError):
    """Le catalogue ne contient aucun point pour ce département."""

    def __init__(self, department: str):
        self.department = department
        super().__init__(f"Aucun point de ronde pour le département {department}.")
