"""
Range-encoded table labels
==========================

The paper charts label their rows and columns with ranges rather than single
values. Three label grammars appear in the reference tables:

    - ``"70 to 89"`` : closed interval, words as separator
    - ``"35-39"``    : closed interval, hyphen as separator (integers only)
    - ``"110 +"``    : lower bound with no upper bound

Anything else (titles, blank cells, bare integers such as the ``"100"``
humidity column) is not a range. Callers decide what to do with those.
"""

# Core imports
from __future__ import annotations
import math
import re
from typing import NamedTuple

_NUMBER = r"[-+]?\d+(?:\.\d+)?"
_WORD_RANGE = re.compile(rf"^\s*({_NUMBER})\s+to\s+({_NUMBER})\s*$", re.IGNORECASE)
_HYPHEN_RANGE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")
_OPEN_RANGE = re.compile(rf"^\s*({_NUMBER})\s*\+\s*$")
_LEADING_INTEGER = re.compile(r"^\s*([-+]?\d+)")


class Interval(NamedTuple):
    """
    A closed numeric interval, or a lower bound if ``upper`` is None.

    Attributes
    ----------
    lower : float
        Smallest value contained in the interval.
    upper : float or None
        Largest value contained in the interval, None when unbounded above.
    """

    lower: float
    upper: float | None = None

    @property
    def is_bounded(self) -> bool:
        return self.upper is not None

    def contains(self, value) -> bool:
        """Return True if ``value`` lies inside the interval (bounds included)."""
        try:
            value = float(value)
        except (TypeError, ValueError):
            return False
        if math.isnan(value):
            return False
        if self.upper is None:
            return value >= self.lower
        return self.lower <= value <= self.upper

    def __str__(self) -> str:
        if self.upper is None:
            return f"{_format_number(self.lower)}+"
        return f"{_format_number(self.lower)} to {_format_number(self.upper)}"


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def parse_range(text) -> Interval | None:
    """
    Parse a range-encoded label into an Interval.

    Parameters
    ----------
    text : str or None
        Cell contents to parse.

    Returns
    -------
    Interval or None
        The parsed interval, or None if ``text`` is not a range label. This
        function never raises; blank or malformed labels return None so they
        are skipped as lookup candidates.

    Examples
    --------
    >>> parse_range("70 to 89")
    Interval(lower=70.0, upper=89.0)
    >>> parse_range("110 +")
    Interval(lower=110.0, upper=None)
    >>> parse_range("100") is None
    True
    """
    if not isinstance(text, str) or not text.strip():
        return None

    match = _WORD_RANGE.match(text)
    if match:
        return Interval(float(match.group(1)), float(match.group(2)))

    match = _HYPHEN_RANGE.match(text)
    if match:
        return Interval(float(match.group(1)), float(match.group(2)))

    match = _OPEN_RANGE.match(text)
    if match:
        return Interval(float(match.group(1)), None)

    return None


def parse_integer(text) -> int | None:
    """
    Read the leading integer of a table cell.

    ``"12"`` and ``" 12 "`` both give 12; a cell with no leading digits gives
    None.
    """
    if not isinstance(text, str):
        return None
    match = _LEADING_INTEGER.match(text)
    if match is None:
        return None
    return int(match.group(1))
