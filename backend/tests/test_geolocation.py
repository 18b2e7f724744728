"""
Tests unitaires pour le relevé best-effort des coordonnées.
"""

import time

from patroltrack.schemas.location import Coordinates
from patroltrack.services.geolocation import capture_coordinates


def test_sans_fournisseur():
    assert capture_coordinates(None, 1.0) is None


def test_coordonnees_fournies():
    coords = Coordinates(lat=50.85, lng=4.35)
    assert capture_coordinates(lambda: coords, 1.0) == coords


def test_refus_donne_none():
    def denied():
        raise PermissionError("géolocalisation refusée")

    assert capture_coordinates(denied, 1.0) is None


def test_delai_depasse_donne_none():
    def slow():
        time.sleep(0.5)
        return Coordinates(lat=0, lng=0)

    started = time.monotonic()
    assert capture_coordinates(slow, 0.05) is None
    assert time.monotonic() - started < 0.4


def test_fournisseur_sans_position():
    assert capture_coordinates(lambda: None, 1.0) is None


def test_fournisseurs_bloques_ne_retardent_pas_les_suivants():
    def stuck():
        time.sleep(0.3)
        return Coordinates(lat=0, lng=0)

    for _ in range(6):
        assert capture_coordinates(stuck, 0.02) is None

    coords = Coordinates(lat=50.85, lng=4.35)
    started = time.monotonic()
    assert capture_coordinates(lambda: coords, 0.2) == coords
    assert time.monotonic() - started < 0.2
