"""
Registre des points de ronde (catalogue figé au démarrage).

Le catalogue est injecté à la construction : catalogue par défaut du site
ou fichier JSON désigné par PATROL_LOCATIONS_FILE. Le registre ne crée ni ne
supprime jamais de point pendant une ronde.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import TypeAdapter

from patroltrack.schemas.location import PatrolLocation

logger = logging.getLogger(__name__)

# Points étiquetés du site, utilisés si aucun fichier de catalogue n'est configuré
DEFAULT_LOCATIONS: List[dict] = [
    {
        "id": "entrance-main",
        "name": "Main Entrance",
        "code": "ENT-001",
        "department": "security",
        "required_checks": [
            "Check ID scanners",
            "Verify access control",
            "Monitor CCTV",
            "Log visitor activity",
        ],
    },
    {
        "id": "lobby-level1",
        "name": "Ground Floor Lobby",
        "code": "LOB-001",
        "department": "housekeeping",
        "required_checks": [
            "Clean reception area",
            "Empty trash bins",
            "Check lighting",
            "Sanitize surfaces",
        ],
    },
    {
        "id": "parking-basement",
        "name": "Basement Parking",
        "code": "PRK-B01",
        "department": "security",
        "required_checks": [
            "Check vehicle access",
            "Verify lighting",
            "Inspect emergency exits",
            "Monitor security cameras",
        ],
    },
    {
        "id": "restroom-floor2",
        "name": "Floor 2 Restrooms",
        "code": "RST-002",
        "department": "housekeeping",
        "required_checks": [
            "Restock supplies",
            "Clean facilities",
            "Check plumbing",
            "Sanitize surfaces",
        ],
    },
    {
        "id": "emergency-stair-a",
        "name": "Emergency Stairwell A",
        "code": "EMR-STA",
        "department": "security",
        "required_checks": [
            "Check emergency lighting",
            "Verify exit signs",
            "Test door locks",
            "Clear pathways",
        ],
    },
]

_locations_adapter = TypeAdapter(List[PatrolLocation])


class LocationRegistry:
    """Catalogue immuable des points de ronde, indexé par code et par id."""

    def __init__(self, locations: Iterable[PatrolLocation]):
        self._locations = tuple(locations)
        self._by_code = {}
        self._by_id = {}
        for location in self._locations:
            if location.code in self._by_code:
                raise ValueError(f"Code de point de ronde en double : {location.code}.")
            if location.id in self._by_id:
                raise ValueError(f"Identifiant de point de ronde en double : {location.id}.")
            self._by_code[location.code] = location
            self._by_id[location.id] = location

    def __len__(self) -> int:
        return len(self._locations)

    def all(self) -> List[PatrolLocation]:
        return list(self._locations)

    def find_by_code(self, code: str) -> Optional[PatrolLocation]:
        """Correspondance exacte sur le code ; None n'est pas une erreur."""
        return self._by_code.get(code)

    def find_by_id(self, location_id: str) -> Optional[PatrolLocation]:
        return self._by_id.get(location_id)

    def list_by_department(self, department: str) -> List[PatrolLocation]:
        """Points du département, dans l'ordre du catalogue (stable d'un appel à l'autre)."""
        return [loc for loc in self._locations if loc.department == department]


def parse_locations(raw: list) -> List[PatrolLocation]:
    """Valide une liste brute de points (pydantic) ; lève ValidationError si invalide."""
    return _locations_adapter.validate_python(raw)


def load_registry(path: Optional[str] = None) -> LocationRegistry:
    """
    Construit le registre depuis un fichier JSON (liste de points),
    ou depuis le catalogue par défaut si aucun chemin n'est fourni.

    Lève ValueError si le fichier contient des codes en double,
    ValidationError si un point est invalide.
    """
    if path:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        source = path
    else:
        raw = DEFAULT_LOCATIONS
        source = "catalogue par défaut"

    registry = LocationRegistry(parse_locations(raw))
    logger.info("Catalogue des points de ronde chargé (%s) : %d points", source, len(registry))
    return registry
