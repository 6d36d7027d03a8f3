"""Error classes raised by the monitor components."""


class MonitorError(Exception):
    """Base class for all monitor related errors."""


class AuthError(MonitorError):
    """Session establishment or validation with SIM failed."""


class UpstreamError(MonitorError):
    """A ranking or contest metadata fetch failed or returned unusable data."""

    def __init__(self, message, contest_id=None, status_code=None):
        super().__init__(message)
        self.contest_id = contest_id
        self.status_code = status_code


class DeliveryError(MonitorError):
    """Sending a notification message failed."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class CorruptStateError(MonitorError):
    """The persisted state file cannot be read back."""
