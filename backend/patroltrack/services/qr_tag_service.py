"""
Génération des étiquettes QR des points de ronde.
Le QR encode le code du point tel que le scan le résout (ex. ENT-001).
"""

import io

import qrcode

from patroltrack.exceptions import UnknownLocation
from patroltrack.services.location_registry import LocationRegistry


def generate_qr_image(data: str, box_size: int = 10) -> bytes:
    """Génère une image PNG du QR code encodant le texte donné."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def location_tag_png(registry: LocationRegistry, code: str, box_size: int = 10) -> bytes:
    """
    Étiquette PNG à imprimer pour un point du catalogue.
    Lève UnknownLocation si le code n'existe pas.
    """
    location = registry.find_by_code(code)
    if location is None:
        raise UnknownLocation(code)
    return generate_qr_image(location.code, box_size=box_size)
