"""
Roster queries and the join path for carpools.

The join path is the one place that enforces the capacity invariant. Removal
never has to re-check it since it only shrinks the roster.
"""

from dataclasses import replace
from typing import FrozenSet, Iterable, Tuple

from carpool.core.models import Carpool, Participant, TripLeg
from carpool.exceptions import CarpoolFullError, DuplicateParticipantError
from carpool.logging_config import get_logger

logger = get_logger(__name__)


def drivers(participants: Iterable[Participant]) -> Tuple[Participant, ...]:
    """Participants with any driver role, in join order."""
    return tuple(p for p in participants if p.is_driver)


def passengers(participants: Iterable[Participant]) -> Tuple[Participant, ...]:
    """Participants riding as passengers, in join order."""
    return tuple(p for p in participants if not p.is_driver)


def has_driver(carpool: Carpool) -> bool:
    return any(p.is_driver for p in carpool.participants)


def available_spots(carpool: Carpool) -> int:
    """Spots left before the carpool reaches max_capacity."""
    return max(carpool.max_capacity - len(carpool.participants), 0)


def driven_legs(participants: Iterable[Participant]) -> FrozenSet[TripLeg]:
    """Union of the legs driven by the given participants."""
    legs = set()
    for participant in participants:
        legs.update(participant.role.driven_legs)
    return frozenset(legs)


def covered_legs(carpool: Carpool) -> FrozenSet[TripLeg]:
    """Legs of the carpool's trip that at least one driver covers."""
    return carpool.carpool_type.legs & driven_legs(carpool.participants)


def uncovered_legs(carpool: Carpool, participants: Iterable[Participant]) -> FrozenSet[TripLeg]:
    """Legs of the carpool's trip that none of the given participants drive."""
    return carpool.carpool_type.legs - driven_legs(participants)


def join_carpool(carpool: Carpool, participant: Participant) -> Carpool:
    """
    Add a participant to a carpool.

    Args:
        carpool: Carpool snapshot to join
        participant: Participant joining

    Returns:
        New Carpool with the participant appended

    Raises:
        DuplicateParticipantError: If the email is already in the carpool
        CarpoolFullError: If the carpool has no spots left
    """
    if carpool.find_by_email(participant.email) is not None:
        raise DuplicateParticipantError(
            f"{participant.email} is already a participant of carpool {carpool.carpool_id}"
        )

    if available_spots(carpool) == 0:
        raise CarpoolFullError(
            f"Carpool {carpool.carpool_id} is full "
            f"({len(carpool.participants)}/{carpool.max_capacity})"
        )

    updated = replace(carpool, participants=carpool.participants + (participant,))

    logger.info(
        "participant_joined",
        carpool_id=carpool.carpool_id,
        participant_id=participant.participant_id,
        role=participant.role.value,
        spots_left=available_spots(updated),
    )

    return updated
