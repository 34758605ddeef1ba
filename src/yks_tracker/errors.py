"""Exception types raised by the tracker."""


class TrackerError(Exception):
    """Base class for tracker errors."""


class ValidationError(TrackerError, ValueError):
    """A field value is outside its allowed set or has the wrong shape."""


class ReferentialIntegrityError(TrackerError):
    """A record references a parent that does not exist."""
