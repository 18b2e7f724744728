"""
Modèle SQLAlchemy pour les vérifications de points de ronde.

Append-only : une ligne par soumission réussie, jamais modifiée ni supprimée.
Les photos sont stockées telles que capturées (data-URIs) dans une colonne JSON.
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, String, Text, func

from patroltrack.database import Base


class LocationCheckRecord(Base):
    """Vérification d'un point, preuves photo à l'appui."""
    __tablename__ = "location_checks"

    id = Column(String(64), primary_key=True)
    # Pas de FK : la ronde n'est écrite qu'à sa clôture, après ses vérifications
    session_id = Column(String(64), nullable=False, index=True)
    location_id = Column(String(100), nullable=False)
    location_code = Column(String(100), nullable=False)

    checked_at = Column(DateTime(timezone=True), nullable=False)
    checklist_completed = Column(Boolean, nullable=False, default=False)
    evidence_images = Column(JSON, nullable=False)
    notes = Column(Text, nullable=True)

    latitude = Column(Float, nullable=True)    # NULL = géolocalisation indisponible
    longitude = Column(Float, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
