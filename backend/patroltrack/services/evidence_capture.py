"""
Capture des photos de vérification.

Reçoit les fichiers fournis par le client (UploadFile FastAPI ou tout objet
exposant content_type, filename et file) et les convertit en data-URIs.
Permissif : un fichier illisible est ignoré, le reste du lot est conservé.
"""

import base64
import logging
from typing import Iterable, List

logger = logging.getLogger(__name__)


def capture(raw_files: Iterable) -> List[str]:
    """
    Filtre les fichiers image et les encode en data-URIs, dans l'ordre reçu.

    - Type déclaré autre que image/* → ignoré
    - Lecture en échec ou fichier vide → ignoré (log), le lot continue
    - Lot vide → liste vide ; c'est is_ready_to_submit() qui exige une photo
    """
    images: List[str] = []

    for raw in raw_files or []:
        content_type = (getattr(raw, "content_type", None) or "").lower()
        filename = getattr(raw, "filename", None) or "?"
        if not content_type.startswith("image/"):
            logger.debug("Fichier ignoré (type %r) : %s", content_type, filename)
            continue

        try:
            data = raw.file.read()
        except (OSError, ValueError, AttributeError) as exc:
            logger.warning("Lecture impossible de %s, fichier ignoré : %s", filename, exc)
            continue

        if not data:
            logger.warning("Fichier vide ignoré : %s", filename)
            continue

        encoded = base64.b64encode(data).decode("ascii")
        images.append(f"data:{content_type};base64,{encoded}")

    return images
