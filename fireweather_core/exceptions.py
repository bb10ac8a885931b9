"""
Errors raised while resolving values out of the reference tables.

Every error is a ``ValueError`` so callers that already guard numeric input
errors keep working. The message is meant to be shown to the user as is.
"""


class ResolutionError(ValueError):
    """Base class for all table resolution failures."""


class OutOfRangeError(ResolutionError):
    """A numeric input falls outside every interval on a table axis."""


class InvalidMonthError(ResolutionError):
    """The month does not belong to any month group."""


class InvalidTimeError(ResolutionError):
    """The time of day is not a column label of the month group's block."""


class DataInvalidError(ResolutionError):
    """
    A cell the table layout promises is missing or is not an integer. This
    points to a malformed reference table rather than a bad observation.
    """


class LoadFailureError(ResolutionError):
    """A reference table could not be loaded."""
