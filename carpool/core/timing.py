"""
Time-to-event helpers shared by the authority evaluator and the impact
assessment.
"""

from datetime import datetime
from typing import Optional, Tuple

from carpool.config import RemovalConfig
from carpool.core.models import Event

HIGH_IMPACT_RESTRICTION = (
    "Event is within 24 hours - removal may significantly impact other participants"
)
EMERGENCY_RESTRICTION = "Event is within 2 hours - emergency removal only"

HIGH_IMPACT_WARNING = (
    "Event starts in less than 24 hours - participants may have limited time "
    "to find alternatives"
)
EMERGENCY_WARNING = "Event starts in less than 2 hours - this is an emergency removal"


def _as_local_naive(moment: datetime) -> datetime:
    # Event start times are wall-clock local, so compare in local time.
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


def hours_until_event(event: Event, now: Optional[datetime] = None) -> float:
    """
    Hours from now until the event starts. Negative once the event started.

    Args:
        event: Event to measure against
        now: Reference time (defaults to the current local time). Aware
            datetimes are converted to local time first.
    """
    reference = _as_local_naive(now) if now is not None else datetime.now()
    delta = event.starts_at() - reference
    return delta.total_seconds() / 3600.0


def _threshold_text(template: str, default_hours: float, hours: float) -> str:
    if hours == default_hours:
        return template
    return template.replace(f"{default_hours:g} hours", f"{hours:g} hours")


def time_based_restrictions(
    event: Event,
    config: RemovalConfig,
    now: Optional[datetime] = None,
) -> Tuple[str, ...]:
    """
    Advisory restrictions for removing a driver this close to the event.

    Inside the emergency window both restrictions apply.
    """
    hours = hours_until_event(event, now)
    restrictions = []

    if hours < config.high_impact_hours:
        restrictions.append(
            _threshold_text(HIGH_IMPACT_RESTRICTION, 24, config.high_impact_hours)
        )
    if hours < config.emergency_hours:
        restrictions.append(
            _threshold_text(EMERGENCY_RESTRICTION, 2, config.emergency_hours)
        )

    return tuple(restrictions)


def time_sensitivity_warning(
    hours: float,
    config: RemovalConfig,
) -> Optional[str]:
    """Single most severe warning for the given hours until the event."""
    if hours < config.emergency_hours:
        return _threshold_text(EMERGENCY_WARNING, 2, config.emergency_hours)
    if hours < config.high_impact_hours:
        return _threshold_text(HIGH_IMPACT_WARNING, 24, config.high_impact_hours)
    return None
