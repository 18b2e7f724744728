"""
Configuration partagée pour tous les tests.
Remplace le service de rondes par une instance en mémoire (catalogue par défaut,
puits InMemory) pour éviter toute connexion réelle à PostgreSQL.
"""

import pytest
from fastapi.testclient import TestClient

from patroltrack.main import app
from patroltrack.services.location_registry import DEFAULT_LOCATIONS, LocationRegistry, parse_locations
from patroltrack.services.patrol_service import PatrolService, get_patrol_service
from patroltrack.services.persistence import InMemoryPersistenceSink


@pytest.fixture
def registry():
    return LocationRegistry(parse_locations(DEFAULT_LOCATIONS))


@pytest.fixture
def sink():
    return InMemoryPersistenceSink()


@pytest.fixture
def service(registry, sink):
    return PatrolService(registry, sink, geolocation_timeout=0.1)


@pytest.fixture
def client(service):
    """Client HTTP de test avec le service de rondes en mémoire."""
    app.dependency_overrides[get_patrol_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
