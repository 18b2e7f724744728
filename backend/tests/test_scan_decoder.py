"""
Tests unitaires pour le décodage des scans QR.
Couverture : résolution, code inconnu, texte illisible, isolation des départements.
"""

import pytest

from patroltrack.exceptions import DepartmentMismatch, UnknownLocation
from patroltrack.services.scan_decoder import ScanDecoder


@pytest.fixture
def decoder(registry):
    return ScanDecoder(registry)


def test_scan_valide(decoder):
    location = decoder.resolve("ENT-001", "security")
    assert location.code == "ENT-001"


def test_espaces_du_lecteur_ignores(decoder):
    assert decoder.resolve("  PRK-B01\n", "security").code == "PRK-B01"


def test_bytes_utf8_acceptes(decoder):
    assert decoder.resolve(b"EMR-STA", "security").code == "EMR-STA"


def test_code_inconnu(decoder):
    with pytest.raises(UnknownLocation, match="introuvable"):
        decoder.resolve("NOPE-42", "security")


@pytest.mark.parametrize("garbage", [None, "", "   ", b"\xff\xfe\x00", 12345, {"visitor_id": 1}])
def test_texte_illisible_traite_comme_inconnu(decoder, garbage):
    with pytest.raises(UnknownLocation):
        decoder.resolve(garbage, "security")


@pytest.mark.parametrize("code,department", [
    ("LOB-001", "security"),
    ("RST-002", "security"),
    ("ENT-001", "housekeeping"),
    ("PRK-B01", "maintenance"),
])
def test_departement_different_rejete(decoder, code, department):
    with pytest.raises(DepartmentMismatch) as exc_info:
        decoder.resolve(code, department)
    assert exc_info.value.expected_department == department
    assert exc_info.value.location_department != department


def test_message_indique_le_departement_du_point(decoder):
    with pytest.raises(DepartmentMismatch, match="housekeeping"):
        decoder.resolve("LOB-001", "security")
