"""
Router du catalogue des points de ronde.
Consultation et impression des étiquettes QR.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from patroltrack.exceptions import UnknownLocation
from patroltrack.schemas.location import PatrolLocation, validate_department
from patroltrack.services import qr_tag_service
from patroltrack.services.patrol_service import PatrolService, get_patrol_service

router = APIRouter(prefix="/api/v1/patrol/locations", tags=["Points de ronde"])


@router.get("", response_model=List[PatrolLocation], summary="Lister les points de ronde")
def list_locations(
    department: Optional[str] = None,
    service: PatrolService = Depends(get_patrol_service),
):
    """
    Retourne le catalogue, dans l'ordre de déclaration.
    Filtré par département si `department` est fourni (400 si inconnu).
    """
    if department is None:
        return service.registry.all()
    try:
        department = validate_department(department)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return service.registry.list_by_department(department)


@router.get(
    "/{code}/qr",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
    summary="Étiquette QR d'un point de ronde (PNG)",
)
def get_location_qr(
    code: str,
    box_size: int = Query(10, ge=2, le=40),
    service: PatrolService = Depends(get_patrol_service),
):
    """
    Génère l'étiquette PNG à apposer sur le point : le QR encode le code du point.
    Retourne 404 si le code est inconnu.
    """
    try:
        png = qr_tag_service.location_tag_png(service.registry, code, box_size=box_size)
    except UnknownLocation as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=png, media_type="image/png")
