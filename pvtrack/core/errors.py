from enum import Enum


class Severity(Enum):
    """How a missing or invalid setting is reported."""
    WARNING = "warning"
    FATAL = "fatal"


class TrackerError(Exception):
    """Base class for errors that should stop a simulation run."""


class ConfigurationError(TrackerError):
    """
    The tracker could not be configured: unknown array type,
    missing required setting or a value that cannot be parsed.
    """


class GeometryError(TrackerError):
    """The tracker reached a physically impossible state during evaluation."""
