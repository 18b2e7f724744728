"""
Décodage des scans QR : texte décodé → point de ronde validé.

Le cycle de vie de la caméra (acquisition, boucle de décodage, libération)
reste côté client ; ce module ne reçoit que le texte décodé.
"""

import logging

from patroltrack.exceptions import DepartmentMismatch, UnknownLocation
from patroltrack.schemas.location import PatrolLocation
from patroltrack.services.location_registry import LocationRegistry

logger = logging.getLogger(__name__)


class ScanDecoder:
    def __init__(self, registry: LocationRegistry):
        self._registry = registry

    def resolve(self, raw_code, expected_department: str) -> PatrolLocation:
        """
        Résout le texte scanné en point de ronde du département attendu.

        Un texte illisible (None, vide, bytes non UTF-8, autre type) est traité
        comme un code inconnu, jamais comme un crash.

        Lève UnknownLocation si aucun point ne porte ce code,
        DepartmentMismatch si le point appartient à un autre département.
        """
        code = _normalize(raw_code)
        location = self._registry.find_by_code(code) if code else None
        if location is None:
            logger.warning("Scan rejeté : code inconnu %r", raw_code)
            raise UnknownLocation(code or None)

        if location.department != expected_department:
            logger.warning(
                "Scan rejeté : %s appartient au département %s (ronde %s)",
                location.code, location.department, expected_department,
            )
            raise DepartmentMismatch(location.department, expected_department)

        return location


def _normalize(raw_code) -> str:
    """Texte du scan sans espaces parasites ; chaîne vide si illisible."""
    if isinstance(raw_code, bytes):
        try:
            raw_code = raw_code.decode("utf-8")
        except UnicodeDecodeError:
            return ""
    if not isinstance(raw_code, str):
        return ""
    return raw_code.strip()
