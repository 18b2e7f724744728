"""
Modèle SQLAlchemy pour les rondes persistées.
Une ligne est écrite à la clôture automatique de la ronde.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from patroltrack.database import Base


class PatrolSessionRecord(Base):
    """Ronde terminée d'un opérateur pour un département."""
    __tablename__ = "patrol_sessions"

    id = Column(String(64), primary_key=True)
    operator_id = Column(String(255), nullable=False)
    department = Column(String(20), nullable=False)        # security, housekeeping, maintenance

    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    total_locations = Column(Integer, nullable=False)
    completed_locations = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False)            # active, completed

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
