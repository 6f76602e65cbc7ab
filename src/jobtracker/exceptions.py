"""Custom exception hierarchy for JobTracker."""


class JobTrackerError(Exception):
    """Base exception for all JobTracker errors."""


class ConfigurationError(JobTrackerError):
    """Raised when settings are invalid or missing."""


class StorageError(JobTrackerError):
    """Raised when the backing database cannot complete an operation."""


class RecordNotFoundError(JobTrackerError):
    """Raised when a job or interview id does not exist."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} not found")
        self.kind = kind
        self.record_id = record_id


class InvalidRecordError(JobTrackerError):
    """Raised when a job or interview payload is malformed."""
