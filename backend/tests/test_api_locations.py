"""
Tests d'intégration API pour le catalogue des points de ronde.
Testent GET /api/v1/patrol/locations
      GET /api/v1/patrol/locations/{code}/qr
"""

BASE = "/api/v1/patrol/locations"


def test_catalogue_complet(client):
    response = client.get(BASE)
    assert response.status_code == 200
    codes = [loc["code"] for loc in response.json()]
    assert codes == ["ENT-001", "LOB-001", "PRK-B01", "RST-002", "EMR-STA"]


def test_catalogue_filtre_par_departement(client):
    response = client.get(BASE, params={"department": "housekeeping"})
    assert [loc["code"] for loc in response.json()] == ["LOB-001", "RST-002"]


def test_departement_invalide(client):
    response = client.get(BASE, params={"department": "kitchen"})
    assert response.status_code == 400


def test_etiquette_qr(client):
    response = client.get(f"{BASE}/ENT-001/qr")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_etiquette_qr_code_inconnu(client):
    response = client.get(f"{BASE}/XXX-000/qr")
    assert response.status_code == 404


def test_health(client):
    response = client.get("/api/health")
    assert response.json()["status"] == "ok"
