"""
Tests unitaires pour le puits de persistance SQLAlchemy.
La session BDD est mockée : on vérifie les écritures et la fermeture.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from patroltrack.models.location_check import LocationCheckRecord
from patroltrack.models.patrol_session import PatrolSessionRecord
from patroltrack.schemas.checklist import LocationCheck
from patroltrack.schemas.location import Coordinates
from patroltrack.schemas.session import PatrolSession
from patroltrack.services.persistence import DatabasePersistenceSink


def make_check(coordinates=None):
    return LocationCheck(
        session_id="session-1",
        location_id="entrance-main",
        location_code="ENT-001",
        checked_at=datetime(2026, 5, 25, 8, 0, tzinfo=timezone.utc),
        checklist_completed=True,
        evidence_images=["img-1", "img-2"],
        notes="RAS",
        coordinates=coordinates,
    )


def test_verification_inseree_et_commitee():
    db = MagicMock()
    sink = DatabasePersistenceSink(lambda: db)

    sink.save_location_check(make_check(Coordinates(lat=50.1, lng=4.2)))

    db.add.assert_called_once()
    record = db.add.call_args.args[0]
    assert isinstance(record, LocationCheckRecord)
    assert record.session_id == "session-1"
    assert record.evidence_images == ["img-1", "img-2"]
    assert record.latitude == 50.1
    assert record.longitude == 4.2
    db.commit.assert_called_once()
    db.close.assert_called_once()


def test_verification_sans_coordonnees():
    db = MagicMock()
    DatabasePersistenceSink(lambda: db).save_location_check(make_check())
    record = db.add.call_args.args[0]
    assert record.latitude is None
    assert record.longitude is None


def test_ronde_fusionnee():
    db = MagicMock()
    session = PatrolSession(
        operator_id="op1",
        department="security",
        started_at=datetime(2026, 5, 25, 8, 0, tzinfo=timezone.utc),
        ended_at=datetime(2026, 5, 25, 9, 0, tzinfo=timezone.utc),
        total_locations=3,
        completed_locations=3,
        status="completed",
    )

    DatabasePersistenceSink(lambda: db).save_session(session)

    record = db.merge.call_args.args[0]
    assert isinstance(record, PatrolSessionRecord)
    assert record.id == session.id
    assert record.status == "completed"
    db.commit.assert_called_once()
    db.close.assert_called_once()


def test_session_fermee_meme_en_cas_d_erreur():
    db = MagicMock()
    db.commit.side_effect = RuntimeError("connexion perdue")

    with pytest.raises(RuntimeError):
        DatabasePersistenceSink(lambda: db).save_location_check(make_check())
    db.close.assert_called_once()


def test_cloture_dans_une_seule_transaction():
    db = MagicMock()
    session = PatrolSession(
        operator_id="op1",
        department="security",
        started_at=datetime(2026, 5, 25, 8, 0, tzinfo=timezone.utc),
        ended_at=datetime(2026, 5, 25, 9, 0, tzinfo=timezone.utc),
        total_locations=1,
        completed_locations=1,
        status="completed",
    )

    DatabasePersistenceSink(lambda: db).save_completion(make_check(), session)

    assert isinstance(db.add.call_args.args[0], LocationCheckRecord)
    assert db.merge.call_args.args[0].status == "completed"
    db.commit.assert_called_once()
    db.close.assert_called_once()


def test_cloture_annulee_si_le_commit_echoue():
    db = MagicMock()
    db.commit.side_effect = RuntimeError("connexion perdue")
    session = PatrolSession(
        operator_id="op1",
        department="security",
        started_at=datetime(2026, 5, 25, 8, 0, tzinfo=timezone.utc),
        total_locations=1,
    )

    with pytest.raises(RuntimeError):
        DatabasePersistenceSink(lambda: db).save_completion(make_check(), session)
    db.rollback.assert_called_once()
    db.close.assert_called_once()
