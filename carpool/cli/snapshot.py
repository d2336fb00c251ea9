"""
JSON snapshot files used by the CLI.

A snapshot holds one event and one of its carpools:

    {"event": {...}, "carpool": {...}}

After a disbanding removal the carpool is written as null.
"""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from carpool.core.models import Carpool, Event
from carpool.exceptions import InvalidRecordError, SnapshotError
from carpool.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Snapshot:
    event: Event
    carpool: Carpool


def load_snapshot(path: str) -> Snapshot:
    """
    Load a snapshot file.

    Raises:
        SnapshotError: If the file is unreadable, malformed, or the carpool
            does not belong to the event
    """
    snapshot_path = Path(path)
    try:
        with open(snapshot_path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise SnapshotError(f"Failed to read snapshot {snapshot_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Snapshot {snapshot_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict) or "event" not in data or "carpool" not in data:
        raise SnapshotError(f"Snapshot {snapshot_path} must contain 'event' and 'carpool'")
    if data["carpool"] is None:
        raise SnapshotError(f"Carpool in snapshot {snapshot_path} has been disbanded")

    try:
        event = Event.from_dict(data["event"])
        carpool = Carpool.from_dict(data["carpool"])
    except InvalidRecordError as e:
        raise SnapshotError(f"Invalid record in snapshot {snapshot_path}: {e}") from e

    if carpool.event_id != event.event_id:
        raise SnapshotError(
            f"Carpool {carpool.carpool_id} belongs to event {carpool.event_id}, "
            f"not {event.event_id}"
        )

    logger.debug(f"Loaded snapshot from {snapshot_path}")
    return Snapshot(event=event, carpool=carpool)


def save_snapshot(path: str, event: Event, carpool: Optional[Carpool]) -> None:
    """
    Atomically write a snapshot file.

    Raises:
        SnapshotError: If the file cannot be written
    """
    snapshot_path = Path(path)
    payload = {
        "event": event.to_dict(),
        "carpool": carpool.to_dict() if carpool is not None else None,
    }

    try:
        snapshot_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(snapshot_path.parent), prefix=f".{snapshot_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, snapshot_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise SnapshotError(f"Failed to write snapshot {snapshot_path}: {e}") from e

    logger.info(f"Wrote snapshot to {snapshot_path}")
