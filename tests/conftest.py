"""
Shared fixtures for Carpool Core tests.
"""

import json
import shutil
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from carpool.core.models import (
    Carpool,
    CarpoolType,
    Event,
    Participant,
    ParticipantRole,
)

NOW = datetime(2025, 2, 13, 9, 0)

ORGANIZER = "organizer@example.com"
CARPOOL_CREATOR = "creator@example.com"


def make_event(hours_ahead: float = 48, created_by: str = ORGANIZER) -> Event:
    """Build an event starting hours_ahead hours after NOW."""
    start = NOW + timedelta(hours=hours_ahead)
    return Event(
        event_id="evt-1",
        name="Tech Conference 2025",
        location="Convention Center Downtown",
        date=start.strftime("%Y-%m-%d"),
        time=start.strftime("%H:%M"),
        description="Annual technology conference",
        created_by=created_by,
        created_at="2025-01-10T10:00:00Z",
    )


def make_participant(participant_id: str, role: ParticipantRole, email: str = None) -> Participant:
    return Participant(
        participant_id=participant_id,
        name=f"Person {participant_id}",
        email=email or f"p{participant_id}@example.com",
        role=role,
        joined_at="2025-01-11T09:00:00Z",
        vehicle_info="2023 Honda Civic - Blue" if role.is_driver else None,
    )


def make_carpool(*participants: Participant, max_capacity: int = 4,
                 created_by: str = CARPOOL_CREATOR,
                 carpool_type: CarpoolType = CarpoolType.ROUND_TRIP) -> Carpool:
    return Carpool(
        carpool_id="cp-1",
        event_id="evt-1",
        name="Downtown Carpool",
        carpool_type=carpool_type,
        max_capacity=max_capacity,
        created_by=created_by,
        created_at="2025-01-11T09:00:00Z",
        participants=tuple(participants),
    )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def event():
    """Event two days after NOW."""
    return make_event(48)


@pytest.fixture
def driver_a():
    return make_participant("1", ParticipantRole.DRIVE_BOTH)


@pytest.fixture
def driver_b():
    return make_participant("2", ParticipantRole.DRIVE_TO)


@pytest.fixture
def passenger():
    return make_participant("3", ParticipantRole.PASSENGER)


@pytest.fixture
def one_driver_carpool(driver_a, passenger):
    """One driver and one passenger."""
    return make_carpool(driver_a, passenger)


@pytest.fixture
def two_driver_carpool(driver_a, driver_b, passenger):
    """Two drivers and one passenger."""
    return make_carpool(driver_a, driver_b, passenger)


@pytest.fixture
def snapshot_file(temp_dir, event, two_driver_carpool):
    """Snapshot file holding the event and the two-driver carpool."""
    path = temp_dir / "snapshot.json"
    path.write_text(json.dumps({
        "event": event.to_dict(),
        "carpool": two_driver_carpool.to_dict(),
    }))
    return path


@pytest.fixture
def now():
    """Fixed reference time all events are scheduled against."""
    return NOW


@pytest.fixture(name="make_event")
def make_event_fixture():
    """Factory for events starting a number of hours after NOW."""
    return make_event


@pytest.fixture(name="make_participant")
def make_participant_fixture():
    return make_participant


@pytest.fixture(name="make_carpool")
def make_carpool_fixture():
    return make_carpool
