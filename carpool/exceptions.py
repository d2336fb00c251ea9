"""
Exception hierarchy for Carpool Core.

All exceptions raised by the core derive from CarpoolError so callers can
catch the whole family in one place.
"""


class CarpoolError(Exception):
    """Base exception for all Carpool Core errors."""
    pass


# Record errors

class InvalidRecordError(CarpoolError):
    """Raised when a record dictionary is missing fields or has bad values."""
    pass


class InvalidCarpoolError(InvalidRecordError):
    """Raised when a carpool record violates its structural invariants."""
    pass


# Roster errors

class ParticipantNotFoundError(CarpoolError):
    """
    Raised when a participant id does not match anyone in the carpool.

    Signals a mismatch between what the caller displayed and the snapshot
    it passed in. Not retryable.
    """

    def __init__(self, participant_id: str, carpool_id: str):
        self.participant_id = participant_id
        self.carpool_id = carpool_id
        super().__init__(
            f"Participant {participant_id} not found in carpool {carpool_id}"
        )


class CarpoolFullError(CarpoolError):
    """Raised when joining a carpool that has no available spots."""
    pass


class DuplicateParticipantError(CarpoolError):
    """Raised when an email already belongs to a participant of the carpool."""
    pass


# Configuration and snapshot errors

class ConfigurationError(CarpoolError):
    """Raised when the configuration file cannot be read or is invalid."""
    pass


class SnapshotError(CarpoolError):
    """Raised when a snapshot file cannot be read or written."""
    pass
