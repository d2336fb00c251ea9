"""
Driver removal authority evaluation.

This module provides the RemovalAuthorityEvaluator, which decides whether an
actor may remove a driver from a carpool and under what caveats.

Denial is a normal outcome returned as a RemovalAuthority, never raised.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from carpool.config import RemovalConfig
from carpool.core.models import Carpool, Event, Participant
from carpool.core.roster import drivers
from carpool.core.timing import time_based_restrictions
from carpool.logging_config import get_logger, log_removal_decision

logger = get_logger(__name__)

NO_PERMISSION = "You do not have permission to remove participants from this carpool"
ONLY_DRIVERS = "Only drivers can be removed using this feature"
SOLE_DRIVER_SELF_REMOVAL = (
    "You cannot remove yourself as the only driver. Transfer driving "
    "responsibility first or disband the carpool."
)
DRIVERS_REMOVE_SELF_ONLY = (
    "Drivers can only remove themselves. Contact the carpool or event "
    "organizer to remove other drivers."
)
UNKNOWN_AUTHORIZATION = "Unknown authorization error"
SELF_REMOVAL_RESTRICTION = (
    "As a driver, you can remove yourself but this may affect other passengers"
)


@dataclass(frozen=True)
class RemovalAuthority:
    """
    Verdict on whether an actor may remove a driver.

    Attributes:
        can_remove: Whether the removal is permitted
        requires_confirmation: Whether the caller must get explicit confirmation
        restrictions: Advisory restrictions to surface before confirming
        reason: Why the removal was denied (None when granted)
    """
    can_remove: bool
    requires_confirmation: bool
    restrictions: Tuple[str, ...] = ()
    reason: Optional[str] = None

    @classmethod
    def deny(cls, reason: str) -> "RemovalAuthority":
        return cls(can_remove=False, requires_confirmation=False, reason=reason)

    @classmethod
    def grant(cls, restrictions: Tuple[str, ...]) -> "RemovalAuthority":
        return cls(can_remove=True, requires_confirmation=True, restrictions=restrictions)

    def to_dict(self) -> dict:
        data = {
            "can_remove": self.can_remove,
            "requires_confirmation": self.requires_confirmation,
            "restrictions": list(self.restrictions),
        }
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class ActorStanding:
    """How the acting user relates to a carpool and its event."""
    is_event_creator: bool
    is_carpool_creator: bool
    is_current_driver: bool

    @property
    def has_standing(self) -> bool:
        return self.is_event_creator or self.is_carpool_creator or self.is_current_driver


def classify_actor(actor_email: str, carpool: Carpool, event: Event) -> ActorStanding:
    """Work out the actor's standing from their email."""
    return ActorStanding(
        is_event_creator=event.created_by == actor_email,
        is_carpool_creator=carpool.created_by == actor_email,
        is_current_driver=any(
            p.email == actor_email for p in drivers(carpool.participants)
        ),
    )


class RemovalAuthorityEvaluator:
    """
    Evaluates driver removal requests against the authority policy.

    The policy is ordered: the first applicable denial wins, then grants are
    checked from broadest to narrowest authority. Event creators and carpool
    creators may remove any driver; drivers may only remove themselves.
    Nobody may remove themselves as the last driver.
    """

    def __init__(self, config: Optional[RemovalConfig] = None):
        """
        Initialize RemovalAuthorityEvaluator.

        Args:
            config: Removal policy settings (defaults to RemovalConfig())
        """
        self.config = config or RemovalConfig()

    def evaluate(
        self,
        actor_email: str,
        carpool: Carpool,
        event: Event,
        target: Participant,
        now: Optional[datetime] = None,
    ) -> RemovalAuthority:
        """
        Decide whether actor_email may remove target from carpool.

        Args:
            actor_email: Identity of the acting user
            carpool: Carpool snapshot
            event: Event the carpool belongs to
            target: Driver the actor wants to remove
            now: Reference time for the time-based restrictions

        Returns:
            RemovalAuthority verdict
        """
        authority = self._decide(actor_email, carpool, event, target, now)

        log_removal_decision(
            logger,
            actor_email=actor_email,
            carpool_id=carpool.carpool_id,
            target_participant_id=target.participant_id,
            allowed=authority.can_remove,
            reason=authority.reason,
            restrictions=authority.restrictions,
        )

        return authority

    def _decide(
        self,
        actor_email: str,
        carpool: Carpool,
        event: Event,
        target: Participant,
        now: Optional[datetime],
    ) -> RemovalAuthority:
        standing = classify_actor(actor_email, carpool, event)
        is_self_removal = target.email == actor_email

        if not standing.has_standing:
            return RemovalAuthority.deny(NO_PERMISSION)

        if not target.is_driver:
            return RemovalAuthority.deny(ONLY_DRIVERS)

        if is_self_removal and len(drivers(carpool.participants)) == 1:
            return RemovalAuthority.deny(SOLE_DRIVER_SELF_REMOVAL)

        if standing.is_event_creator or standing.is_carpool_creator:
            return RemovalAuthority.grant(
                time_based_restrictions(event, self.config, now)
            )

        if standing.is_current_driver:
            if not is_self_removal:
                return RemovalAuthority.deny(DRIVERS_REMOVE_SELF_ONLY)
            return RemovalAuthority.grant(
                time_based_restrictions(event, self.config, now)
                + (SELF_REMOVAL_RESTRICTION,)
            )

        # has_standing guarantees one of the branches above returned
        logger.error(
            "removal_authority_invariant_violation",
            actor_email=actor_email,
            carpool_id=carpool.carpool_id,
            standing=str(standing),
        )
        return RemovalAuthority.deny(UNKNOWN_AUTHORIZATION)


_default_evaluator = RemovalAuthorityEvaluator()


def evaluate_removal_authority(
    actor_email: str,
    carpool: Carpool,
    event: Event,
    target: Participant,
    now: Optional[datetime] = None,
) -> RemovalAuthority:
    """Evaluate removal authority with the default policy settings."""
    return _default_evaluator.evaluate(actor_email, carpool, event, target, now)
