"""
Removal request construction.

A removal request records that someone asked for a driver to be removed
without having the authority to do it directly. Only construction lives
here; approval and rejection are handled by the integrating application.
"""

import uuid
from datetime import datetime
from typing import Optional

from carpool.core.models import RemovalRequest, RequestStatus, format_timestamp, utc_now
from carpool.logging_config import get_logger

logger = get_logger(__name__)


def create_removal_request(
    carpool_id: str,
    target_participant_id: str,
    requested_by: str,
    reason: str,
    now: Optional[datetime] = None,
) -> RemovalRequest:
    """
    Create a pending removal request.

    Args:
        carpool_id: Carpool the driver belongs to
        target_participant_id: Driver to be removed
        requested_by: Identity of the requesting user
        reason: Why the removal is requested
        now: Request time (defaults to the current UTC time)

    Returns:
        RemovalRequest with a fresh id and status pending
    """
    request = RemovalRequest(
        request_id=f"req-{uuid.uuid4().hex}",
        carpool_id=carpool_id,
        target_participant_id=target_participant_id,
        requested_by=requested_by,
        reason=reason,
        timestamp=format_timestamp(now or utc_now()),
        status=RequestStatus.PENDING,
    )

    logger.info(
        "removal_request_created",
        request_id=request.request_id,
        carpool_id=carpool_id,
        target_participant_id=target_participant_id,
        requested_by=requested_by,
    )

    return request
