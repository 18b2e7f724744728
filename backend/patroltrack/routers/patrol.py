"""
Router des rondes QR : démarrage, scan, checklist, photos, soumission.
Appelé par l'app mobile de l'opérateur ; un seul point en cours par ronde.
"""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from patroltrack.exceptions import (
    PatrolError,
    SessionNotActive,
    SessionNotFound,
    UnknownLocation,
)
from patroltrack.schemas.checklist import (
    CheckItemUpdate,
    ChecklistResponse,
    NotesUpdate,
    ScanRequest,
    SubmitRequest,
    SubmitResponse,
)
from patroltrack.schemas.location import LocationVisit
from patroltrack.schemas.session import SessionResponse, SessionStart
from patroltrack.services.patrol_service import PatrolService, get_patrol_service

router = APIRouter(prefix="/api/v1/patrol/sessions", tags=["Rondes"])


def _to_http(e: PatrolError) -> HTTPException:
    """Traduit une erreur métier en réponse HTTP (404 / 409 / 400)."""
    if isinstance(e, (SessionNotFound, UnknownLocation)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, SessionNotActive):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


@router.post("", response_model=SessionResponse, status_code=201, summary="Démarrer une ronde")
def start_session(data: SessionStart, service: PatrolService = Depends(get_patrol_service)):
    """
    Démarre une ronde pour un département ; total_locations est calculé depuis le catalogue.
    Retourne 400 si le département n'a aucun point.
    """
    try:
        return service.start_session(data.department, data.operator_id)
    except PatrolError as e:
        raise _to_http(e)


@router.get("/{session_id}", response_model=SessionResponse, summary="Détail d'une ronde")
def get_session(session_id: str, service: PatrolService = Depends(get_patrol_service)):
    """Retourne la ronde avec sa progression en pourcentage."""
    try:
        return service.get_session(session_id)
    except PatrolError as e:
        raise _to_http(e)


@router.get(
    "/{session_id}/locations",
    response_model=List[LocationVisit],
    summary="Points de la ronde et passages enregistrés",
)
def list_session_locations(session_id: str, service: PatrolService = Depends(get_patrol_service)):
    try:
        return service.list_session_locations(session_id)
    except PatrolError as e:
        raise _to_http(e)


@router.post("/{session_id}/scan", response_model=ChecklistResponse, summary="Scanner un point")
def scan_location(
    session_id: str,
    data: ScanRequest,
    service: PatrolService = Depends(get_patrol_service),
):
    """
    Reçoit le texte décodé par le lecteur QR et charge la checklist du point.

    Une checklist non soumise est abandonnée sans trace.
    Retourne 404 si le code est inconnu, 400 si le point est d'un autre
    département, 409 si la ronde est terminée.
    """
    try:
        return service.scan(session_id, data.raw_code)
    except PatrolError as e:
        raise _to_http(e)


@router.get("/{session_id}/checklist", response_model=ChecklistResponse, summary="Checklist courante")
def get_checklist(session_id: str, service: PatrolService = Depends(get_patrol_service)):
    try:
        return service.get_checklist(session_id)
    except PatrolError as e:
        raise _to_http(e)


@router.put(
    "/{session_id}/checklist/items",
    response_model=ChecklistResponse,
    summary="Cocher un contrôle",
)
def set_check_value(
    session_id: str,
    data: CheckItemUpdate,
    service: PatrolService = Depends(get_patrol_service),
):
    """Coche ou décoche un contrôle ; un contrôle inconnu est ignoré."""
    try:
        return service.set_check_value(session_id, data.check_name, data.done)
    except PatrolError as e:
        raise _to_http(e)


@router.put(
    "/{session_id}/checklist/notes",
    response_model=ChecklistResponse,
    summary="Notes du point courant",
)
def set_notes(
    session_id: str,
    data: NotesUpdate,
    service: PatrolService = Depends(get_patrol_service),
):
    try:
        return service.set_notes(session_id, data.notes)
    except PatrolError as e:
        raise _to_http(e)


@router.post(
    "/{session_id}/checklist/images",
    response_model=ChecklistResponse,
    summary="Joindre des photos de vérification",
)
def add_images(
    session_id: str,
    files: List[UploadFile] = File(...),
    service: PatrolService = Depends(get_patrol_service),
):
    """
    Ajoute les photos au point courant (multipart, plusieurs fichiers possibles).
    Les fichiers non image et les lectures en échec sont ignorés sans bloquer le lot.
    """
    try:
        return service.add_images(session_id, files)
    except PatrolError as e:
        raise _to_http(e)


@router.post(
    "/{session_id}/checklist/submit",
    response_model=SubmitResponse,
    summary="Terminer la vérification du point",
)
def submit_checklist(
    session_id: str,
    data: SubmitRequest,
    service: PatrolService = Depends(get_patrol_service),
):
    """
    Enregistre la vérification du point courant et fait progresser la ronde.

    Exige tous les contrôles cochés et au moins une photo (400 sinon).
    La ronde passe à completed d'elle-même au dernier point.
    Retourne 409 si la ronde est déjà terminée.
    """
    try:
        return service.submit(session_id, coordinates=data.coordinates)
    except PatrolError as e:
        raise _to_http(e)
