"""
Core components for Carpool Core.

This module contains the core primitives:
- Event, carpool and participant records
- Removal authority evaluation
- Removal execution and impact assessment
- Removal request construction
- Roster queries and the join path
"""

from carpool.core.authority import (
    RemovalAuthority,
    RemovalAuthorityEvaluator,
    evaluate_removal_authority,
)
from carpool.core.models import (
    Carpool,
    CarpoolType,
    Event,
    NotificationKind,
    Participant,
    ParticipantRole,
    RemovalNotification,
    RemovalRequest,
    RequestStatus,
    TripLeg,
)
from carpool.core.removal import (
    RemovalExecutor,
    RemovalImpact,
    RemovalResult,
    assess_removal_impact,
    execute_driver_removal,
)
from carpool.core.requests import create_removal_request
from carpool.core.roster import join_carpool

__all__ = [
    "Carpool",
    "CarpoolType",
    "Event",
    "NotificationKind",
    "Participant",
    "ParticipantRole",
    "RemovalAuthority",
    "RemovalAuthorityEvaluator",
    "RemovalExecutor",
    "RemovalImpact",
    "RemovalNotification",
    "RemovalRequest",
    "RemovalResult",
    "RequestStatus",
    "TripLeg",
    "assess_removal_impact",
    "create_removal_request",
    "evaluate_removal_authority",
    "execute_driver_removal",
    "join_carpool",
]
