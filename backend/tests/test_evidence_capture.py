"""
Tests unitaires pour la capture des photos de vérification.
Couverture : filtrage par type, encodage data-URI, lot vide, lecture en échec.
"""

import base64
import io
from types import SimpleNamespace
from unittest.mock import MagicMock

from patroltrack.services.evidence_capture import capture


def make_upload(content=b"\xff\xd8\xff\xe0fake-jpeg", content_type="image/jpeg", filename="photo.jpg"):
    """Fichier reçu par le client : mêmes attributs qu'un UploadFile."""
    return SimpleNamespace(content_type=content_type, filename=filename, file=io.BytesIO(content))


def test_lot_vide():
    assert capture([]) == []
    assert capture(None) == []


def test_image_encodee_en_data_uri():
    [image] = capture([make_upload(content=b"PNGDATA", content_type="image/png")])
    assert image == "data:image/png;base64," + base64.b64encode(b"PNGDATA").decode()


def test_fichiers_non_image_ignores():
    files = [
        make_upload(content=b"a", content_type="image/jpeg"),
        make_upload(content=b"b", content_type="application/pdf", filename="rapport.pdf"),
        make_upload(content=b"c", content_type=None, filename="inconnu"),
        make_upload(content=b"d", content_type="image/webp"),
    ]
    images = capture(files)
    assert len(images) == 2
    assert images[0].startswith("data:image/jpeg;base64,")
    assert images[1].startswith("data:image/webp;base64,")


def test_lecture_en_echec_n_interrompt_pas_le_lot():
    broken = SimpleNamespace(content_type="image/jpeg", filename="casse.jpg", file=MagicMock())
    broken.file.read.side_effect = OSError("lecture impossible")

    images = capture([make_upload(content=b"ok-1"), broken, make_upload(content=b"ok-2")])

    assert len(images) == 2


def test_fichier_vide_ignore():
    assert capture([make_upload(content=b"")]) == []


def test_ordre_conserve():
    images = capture([make_upload(content=b"first"), make_upload(content=b"second")])
    assert images[0].endswith(base64.b64encode(b"first").decode())
    assert images[1].endswith(base64.b64encode(b"second").decode())
