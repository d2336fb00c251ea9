"""
Driver removal execution.

This module provides the RemovalExecutor, which computes the carpool that
results from removing a driver together with every notification the removal
produces, and the impact assessment callers show before confirming.

The executor does not re-check authority. Callers must evaluate authority
with RemovalAuthorityEvaluator first and only execute granted removals.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import FrozenSet, List, Optional, Tuple

from carpool.config import RemovalConfig
from carpool.core.models import (
    Carpool,
    Event,
    NotificationKind,
    Participant,
    RemovalNotification,
    TripLeg,
    format_timestamp,
    utc_now,
)
from carpool.core.roster import drivers, passengers, uncovered_legs
from carpool.core.timing import hours_until_event, time_sensitivity_warning
from carpool.exceptions import ParticipantNotFoundError
from carpool.logging_config import get_logger, log_removal_execution

logger = get_logger(__name__)


@dataclass(frozen=True)
class RemovalResult:
    """
    Outcome of an executed driver removal.

    Attributes:
        updated_carpool: Carpool without the removed driver, or None if disbanded
        notifications: Notifications to deliver, in emission order
        disbanded: Whether the carpool was disbanded
    """
    updated_carpool: Optional[Carpool]
    notifications: Tuple[RemovalNotification, ...]
    disbanded: bool

    def to_dict(self) -> dict:
        return {
            "updated_carpool": (
                self.updated_carpool.to_dict() if self.updated_carpool is not None else None
            ),
            "notifications": [n.to_dict() for n in self.notifications],
            "disbanded": self.disbanded,
        }


@dataclass(frozen=True)
class RemovalImpact:
    """
    What a removal would do, for display before the caller confirms it.

    Attributes:
        remaining_drivers: Drivers left after the removal
        affected_passengers: Passengers in the carpool
        hours_until_event: Hours until the event starts
        will_disband: Whether executing the removal disbands the carpool
        uncovered_legs: Trip legs no remaining driver covers
        time_sensitivity: Warning for removals close to the event, if any
    """
    remaining_drivers: int
    affected_passengers: int
    hours_until_event: float
    will_disband: bool
    uncovered_legs: FrozenSet[TripLeg]
    time_sensitivity: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "remaining_drivers": self.remaining_drivers,
            "affected_passengers": self.affected_passengers,
            "hours_until_event": round(self.hours_until_event, 2),
            "will_disband": self.will_disband,
            "uncovered_legs": sorted(leg.value for leg in self.uncovered_legs),
            "time_sensitivity": self.time_sensitivity,
        }


class RemovalExecutor:
    """
    Applies an authorized driver removal to a carpool snapshot.

    Works purely on the snapshot it is given and returns a new one. Callers
    commit the result and must serialize concurrent removals themselves.
    """

    def __init__(self, config: Optional[RemovalConfig] = None):
        """
        Initialize RemovalExecutor.

        Args:
            config: Removal policy settings (defaults to RemovalConfig())
        """
        self.config = config or RemovalConfig()

    def should_disband(self, remaining: Tuple[Participant, ...]) -> bool:
        """Whether a carpool left with these participants is disbanded."""
        if not remaining:
            return True
        if self.config.disband_without_driver:
            return not drivers(remaining)
        return False

    def _split(
        self, carpool: Carpool, target_participant_id: str
    ) -> Tuple[Participant, Tuple[Participant, ...]]:
        target = carpool.find_participant(target_participant_id)
        if target is None:
            raise ParticipantNotFoundError(target_participant_id, carpool.carpool_id)
        remaining = tuple(
            p for p in carpool.participants if p.participant_id != target_participant_id
        )
        return target, remaining

    def execute(
        self,
        carpool: Carpool,
        event: Event,
        target_participant_id: str,
        removed_by_email: str,
        reason: str,
        now: Optional[datetime] = None,
    ) -> RemovalResult:
        """
        Remove a driver and compute the resulting notifications.

        Args:
            carpool: Carpool snapshot
            event: Event the carpool belongs to
            target_participant_id: Driver being removed
            removed_by_email: Identity of the user performing the removal
            reason: Reason for the removal, embedded in notifications
            now: Execution time (defaults to the current UTC time)

        Returns:
            RemovalResult with the updated carpool or a disbandment

        Raises:
            ParticipantNotFoundError: If the target is not in the carpool
            ValueError: If reason is empty
        """
        if not reason or not reason.strip():
            raise ValueError("A reason is required to remove a driver")

        target, remaining = self._split(carpool, target_participant_id)
        remaining_drivers = drivers(remaining)
        affected_passengers = passengers(remaining)
        timestamp = format_timestamp(now or utc_now())

        def notify(kind: NotificationKind, message: str, recipient: Participant) -> RemovalNotification:
            return RemovalNotification.create(
                kind=kind,
                carpool=carpool,
                event=event,
                message=message,
                timestamp=timestamp,
                recipient_id=recipient.participant_id,
            )

        notifications: List[RemovalNotification] = []

        if self.should_disband(remaining):
            for participant in remaining:
                notifications.append(notify(
                    NotificationKind.CARPOOL_DISBANDED,
                    f'The carpool "{carpool.name}" for {event.name} has been disbanded '
                    f"because the driver was removed. Reason: {reason}",
                    participant,
                ))
            result = RemovalResult(
                updated_carpool=None,
                notifications=tuple(notifications),
                disbanded=True,
            )
        else:
            notifications.append(notify(
                NotificationKind.DRIVER_REMOVED,
                f'You have been removed as a driver from the carpool "{carpool.name}" '
                f"for {event.name}. Reason: {reason}",
                target,
            ))

            if remaining_drivers:
                follow_up = "Other drivers are still available."
            else:
                follow_up = "A new driver is needed."

            for participant in remaining:
                if participant.email == removed_by_email:
                    continue
                notifications.append(notify(
                    NotificationKind.DRIVER_REMOVED,
                    f'Driver {target.name} has been removed from your carpool "{carpool.name}" '
                    f"for {event.name}. {follow_up}",
                    participant,
                ))

            if not remaining_drivers:
                for passenger in affected_passengers:
                    notifications.append(notify(
                        NotificationKind.DRIVER_NEEDED,
                        f'URGENT: Your carpool "{carpool.name}" needs a new driver. '
                        "Consider becoming a driver or finding alternative transportation.",
                        passenger,
                    ))

            result = RemovalResult(
                updated_carpool=replace(carpool, participants=remaining),
                notifications=tuple(notifications),
                disbanded=False,
            )

        log_removal_execution(
            logger,
            carpool_id=carpool.carpool_id,
            target_participant_id=target_participant_id,
            removed_by=removed_by_email,
            disbanded=result.disbanded,
            notification_count=len(result.notifications),
            remaining_participants=len(remaining),
        )

        return result

    def assess_impact(
        self,
        carpool: Carpool,
        event: Event,
        target: Participant,
        now: Optional[datetime] = None,
    ) -> RemovalImpact:
        """
        Summarize what removing target would do, without removing anyone.

        Raises:
            ParticipantNotFoundError: If the target is not in the carpool
        """
        _, remaining = self._split(carpool, target.participant_id)
        hours = hours_until_event(event, now)

        return RemovalImpact(
            remaining_drivers=len(drivers(remaining)),
            affected_passengers=len(passengers(remaining)),
            hours_until_event=hours,
            will_disband=self.should_disband(remaining),
            uncovered_legs=uncovered_legs(carpool, remaining),
            time_sensitivity=time_sensitivity_warning(hours, self.config),
        )


_default_executor = RemovalExecutor()


def execute_driver_removal(
    carpool: Carpool,
    event: Event,
    target_participant_id: str,
    removed_by_email: str,
    reason: str,
    now: Optional[datetime] = None,
) -> RemovalResult:
    """Execute a driver removal with the default policy settings."""
    return _default_executor.execute(
        carpool, event, target_participant_id, removed_by_email, reason, now
    )


def assess_removal_impact(
    carpool: Carpool,
    event: Event,
    target: Participant,
    now: Optional[datetime] = None,
) -> RemovalImpact:
    """Assess a removal's impact with the default policy settings."""
    return _default_executor.assess_impact(carpool, event, target, now)
