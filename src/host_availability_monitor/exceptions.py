"""Exception hierarchy for the availability monitor."""


class MonitorError(Exception):
    """Base class for all monitor errors."""


class ConfigurationError(MonitorError):
    """Missing or invalid configuration. Always fatal."""


class ProbeFailure(MonitorError):
    """A single probe attempt failed (timeout, unreachable, command error).

    Raised by one attempt and absorbed by the prober, which counts it as a
    failed attempt.
    """


class WriteError(MonitorError):
    """The snapshot could not be written. The loop continues."""


class FatalWriteError(WriteError):
    """The output destination is structurally unusable. Terminates the process."""


class DeliveryError(MonitorError):
    """The digest could not be delivered to the notification endpoint."""
