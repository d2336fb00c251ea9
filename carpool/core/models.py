"""
Record types for Carpool Core.

Events, carpools and participants are plain frozen dataclasses. The core only
reads them and returns new instances; it never mutates what it was given.
"""

import enum
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from carpool.exceptions import InvalidCarpoolError, InvalidRecordError

MIN_CARPOOL_CAPACITY = 2


class TripLeg(str, enum.Enum):
    TO_EVENT = "to-event"
    FROM_EVENT = "from-event"


class ParticipantRole(str, enum.Enum):
    DRIVE_BOTH = "drive-both"
    DRIVE_TO = "drive-to"
    DRIVE_FROM = "drive-from"
    PASSENGER = "passenger"

    @property
    def driven_legs(self) -> FrozenSet[TripLeg]:
        """Legs this role drives. Empty for passengers."""
        return ROLE_LEGS[self]

    @property
    def is_driver(self) -> bool:
        return bool(ROLE_LEGS[self])


class CarpoolType(str, enum.Enum):
    ROUND_TRIP = "round-trip"
    TO_EVENT = "to-event"
    FROM_EVENT = "from-event"

    @property
    def legs(self) -> FrozenSet[TripLeg]:
        return CARPOOL_TYPE_LEGS[self]


class NotificationKind(str, enum.Enum):
    DRIVER_REMOVED = "driver-removed"
    CARPOOL_DISBANDED = "carpool-disbanded"
    DRIVER_NEEDED = "driver-needed"
    REMOVAL_REQUEST = "removal-request"


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


ROLE_LEGS: Dict[ParticipantRole, FrozenSet[TripLeg]] = {
    ParticipantRole.DRIVE_BOTH: frozenset({TripLeg.TO_EVENT, TripLeg.FROM_EVENT}),
    ParticipantRole.DRIVE_TO: frozenset({TripLeg.TO_EVENT}),
    ParticipantRole.DRIVE_FROM: frozenset({TripLeg.FROM_EVENT}),
    ParticipantRole.PASSENGER: frozenset(),
}

CARPOOL_TYPE_LEGS: Dict[CarpoolType, FrozenSet[TripLeg]] = {
    CarpoolType.ROUND_TRIP: frozenset({TripLeg.TO_EVENT, TripLeg.FROM_EVENT}),
    CarpoolType.TO_EVENT: frozenset({TripLeg.TO_EVENT}),
    CarpoolType.FROM_EVENT: frozenset({TripLeg.FROM_EVENT}),
}


def _check_exhaustive(table: Mapping, enum_cls: type) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        names = ", ".join(sorted(m.value for m in missing))
        raise RuntimeError(f"{enum_cls.__name__} members without a mapping: {names}")


_check_exhaustive(ROLE_LEGS, ParticipantRole)
_check_exhaustive(CARPOOL_TYPE_LEGS, CarpoolType)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as UTC ISO 8601 with a Z suffix.

    Naive datetimes are taken as local time, matching how event start
    times are interpreted.
    """
    text = moment.astimezone(timezone.utc).isoformat()
    return text[:-6] + "Z"



def _require(data: Mapping[str, Any], record: str, *keys: str) -> None:
    missing = [k for k in keys if k not in data]
    if missing:
        raise InvalidRecordError(f"{record} is missing required fields: {', '.join(missing)}")


def _parse_enum(enum_cls: type, value: Any, record: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidRecordError(
            f"{record} has invalid {enum_cls.__name__} '{value}'. Must be one of: {allowed}"
        ) from None


@dataclass(frozen=True)
class Event:
    """
    An event that carpools are organized for.

    Attributes:
        event_id: Event identifier
        name: Display name
        location: Where the event takes place
        date: Start date, YYYY-MM-DD
        time: Start time, HH:MM (local)
        description: Free-text description
        created_by: Email of the event creator
        created_at: ISO 8601 creation timestamp
        end_date: Optional end date
        end_time: Optional end time
    """
    event_id: str
    name: str
    location: str
    date: str
    time: str
    description: str
    created_by: str
    created_at: str
    end_date: Optional[str] = None
    end_time: Optional[str] = None

    def starts_at(self) -> datetime:
        """
        Combine date and time into the scheduled start.

        Returns:
            Naive local datetime of the event start

        Raises:
            InvalidRecordError: If date or time is not ISO formatted
        """
        try:
            return datetime.fromisoformat(f"{self.date}T{self.time}")
        except ValueError as e:
            raise InvalidRecordError(
                f"Event {self.event_id} has an invalid start '{self.date} {self.time}'"
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        for key in ("end_date", "end_time"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        """Create Event from dictionary."""
        _require(data, "Event", "event_id", "name", "date", "time", "created_by")
        event = cls(
            event_id=str(data["event_id"]),
            name=data["name"],
            location=data.get("location", ""),
            date=data["date"],
            time=data["time"],
            description=data.get("description", ""),
            created_by=data["created_by"],
            created_at=data.get("created_at", ""),
            end_date=data.get("end_date"),
            end_time=data.get("end_time"),
        )
        event.starts_at()
        return event


@dataclass(frozen=True)
class Participant:
    """
    A member of exactly one carpool.

    The email doubles as the participant's identity when comparing against
    the acting user.
    """
    participant_id: str
    name: str
    email: str
    role: ParticipantRole
    joined_at: str
    phone: Optional[str] = None
    vehicle_info: Optional[str] = None
    pickup_location: Optional[str] = None

    @property
    def is_driver(self) -> bool:
        return self.role.is_driver

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["role"] = self.role.value
        for key in ("phone", "vehicle_info", "pickup_location"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Participant":
        """Create Participant from dictionary."""
        _require(data, "Participant", "participant_id", "name", "email", "role")
        return cls(
            participant_id=str(data["participant_id"]),
            name=data["name"],
            email=data["email"],
            role=_parse_enum(ParticipantRole, data["role"], "Participant"),
            joined_at=data.get("joined_at", ""),
            phone=data.get("phone"),
            vehicle_info=data.get("vehicle_info"),
            pickup_location=data.get("pickup_location"),
        )


@dataclass(frozen=True)
class Carpool:
    """
    A carpool organized under an event.

    Attributes:
        carpool_id: Carpool identifier
        event_id: Event this carpool belongs to
        name: Display name
        carpool_type: Which legs of the trip the carpool covers
        max_capacity: Maximum participants, drivers included (>= 2)
        participants: Participants in join order
        created_by: Email of the carpool creator
        created_at: ISO 8601 creation timestamp
        created_by_participant: Founding participant, if recorded
    """
    carpool_id: str
    event_id: str
    name: str
    carpool_type: CarpoolType
    max_capacity: int
    created_by: str
    created_at: str
    participants: Tuple[Participant, ...] = ()
    created_by_participant: Optional[Participant] = None

    def __post_init__(self):
        if self.max_capacity < MIN_CARPOOL_CAPACITY:
            raise InvalidCarpoolError(
                f"Carpool {self.carpool_id} capacity must be at least "
                f"{MIN_CARPOOL_CAPACITY}, got {self.max_capacity}"
            )
        if not isinstance(self.participants, tuple):
            object.__setattr__(self, "participants", tuple(self.participants))

    def find_participant(self, participant_id: str) -> Optional[Participant]:
        """Return the participant with the given id, or None."""
        for participant in self.participants:
            if participant.participant_id == participant_id:
                return participant
        return None

    def find_by_email(self, email: str) -> Optional[Participant]:
        """Return the participant with the given email, or None."""
        for participant in self.participants:
            if participant.email == email:
                return participant
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "carpool_id": self.carpool_id,
            "event_id": self.event_id,
            "name": self.name,
            "carpool_type": self.carpool_type.value,
            "max_capacity": self.max_capacity,
            "participants": [p.to_dict() for p in self.participants],
            "created_by": self.created_by,
            "created_at": self.created_at,
        }
        if self.created_by_participant is not None:
            data["created_by_participant"] = self.created_by_participant.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Carpool":
        """Create Carpool from dictionary."""
        _require(
            data, "Carpool",
            "carpool_id", "event_id", "name", "carpool_type", "max_capacity", "created_by",
        )
        max_capacity = data["max_capacity"]
        if isinstance(max_capacity, bool) or not isinstance(max_capacity, int):
            raise InvalidRecordError(f"Carpool has invalid max_capacity {max_capacity!r}")

        founder = data.get("created_by_participant")
        return cls(
            carpool_id=str(data["carpool_id"]),
            event_id=str(data["event_id"]),
            name=data["name"],
            carpool_type=_parse_enum(CarpoolType, data["carpool_type"], "Carpool"),
            max_capacity=max_capacity,
            created_by=data["created_by"],
            created_at=data.get("created_at", ""),
            participants=tuple(Participant.from_dict(p) for p in data.get("participants", [])),
            created_by_participant=Participant.from_dict(founder) if founder else None,
        )


@dataclass(frozen=True)
class RemovalNotification:
    """
    A notice produced by a driver removal.

    Delivery and storage are up to the caller. recipient_id names the
    participant the notice is addressed to.
    """
    notification_id: str
    kind: NotificationKind
    carpool_id: str
    event_id: str
    message: str
    timestamp: str
    read: bool = False
    recipient_id: Optional[str] = None

    @classmethod
    def create(
        cls,
        kind: NotificationKind,
        carpool: Carpool,
        event: Event,
        message: str,
        timestamp: str,
        recipient_id: Optional[str] = None,
    ) -> "RemovalNotification":
        """Build an unread notification with a fresh identifier."""
        return cls(
            notification_id=f"notif-{uuid.uuid4().hex}",
            kind=kind,
            carpool_id=carpool.carpool_id,
            event_id=event.event_id,
            message=message,
            timestamp=timestamp,
            recipient_id=recipient_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass(frozen=True)
class RemovalRequest:
    """A request to remove a driver, awaiting approval outside the core."""
    request_id: str
    carpool_id: str
    target_participant_id: str
    requested_by: str
    reason: str
    timestamp: str
    status: RequestStatus = RequestStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["status"] = self.status.value
        return data
