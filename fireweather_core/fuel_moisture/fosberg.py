"""
Fine Fuel Moisture from the Fosberg Reference Tables
====================================================

This module resolves 1-hour fine dead fuel moisture (FFM) from the Fosberg
and Deeming (1971) charts as they are transcribed into reference tables:

    - Table A (fine fuel moisture table): reference fuel moisture by dry bulb
      temperature and relative humidity
    - Tables B, C and D (FFM correction table): correction by month group,
      shade condition and time of day

The tables are read as data rather than hard coded, so the lookups find rows
and columns by their range labels and section markers instead of by fixed
breakpoints. The final moisture is the reference value plus the correction.

Month Groups
------------
MAY_JUN_JUL : Table B, column offset 0
FEB_MAR_APR_AUG_SEP_OCT : Table C, column offset 8
NOV_DEC_JAN : Table D, column offset 16

Notes
-----
Grid-form correction tables place the three month-group blocks side by side,
eight columns apart, with the time labels in row 1, the unshaded corrections
in row 3 and the shaded corrections in row 5. Labeled-form correction tables
stack the blocks instead: a month-group marker row, then a shade marker row
followed by its correction row for each shade condition.

References
----------
.. [1] Fosberg, M.A., and J.E. Deeming. 1971. Derivation of the 1- and 10-hour
       timelag fuel moisture calculations for fire-danger rating.
       Res. Paper RM-207.
.. [2] National Wildfire Coordinating Group. Dead Fuel Moisture Content.
       https://www.nwcg.gov/publications/pms437/fuel-moisture/dead-fuel-moisture-content
"""

# Core imports
from __future__ import annotations
import logging
from enum import Enum
from typing import NamedTuple

# Internal imports
from fireweather_core.exceptions import (
    DataInvalidError,
    InvalidMonthError,
    InvalidTimeError,
    OutOfRangeError,
)
from fireweather_core.ranges import parse_integer, parse_range
from fireweather_core.tables import Table, contains_marker, locate_marker_row

logger = logging.getLogger(__name__)


class Shade(str, Enum):
    """
    Enumeration of shading conditions.

    Attributes
    ----------
    UNSHADED : str
        Less than 50% of the fine fuels are shaded by canopy or cloud cover.
    SHADED : str
        More than 50% of the fine fuels are shaded.
    """

    UNSHADED: str = "unshaded"
    SHADED: str = "shaded"

    @property
    def marker(self) -> str:
        return SHADE_MARKERS[self]


SHADE_MARKERS = {
    Shade.UNSHADED: "UNSHADED <50%",
    Shade.SHADED: "SHADED >50%",
}


class MonthGroup(NamedTuple):
    name: str
    months: tuple
    column_offset: int
    marker: str


MAY_JUN_JUL = MonthGroup("may-jun-jul", ("may", "jun", "jul"), 0, "MAY-JUN-JUL")
FEB_MAR_APR_AUG_SEP_OCT = MonthGroup(
    "feb-mar-apr-aug-sep-oct",
    ("feb", "mar", "apr", "aug", "sep", "oct"),
    8,
    "FEB-MAR-APR-AUG-SEP-OCT",
)
NOV_DEC_JAN = MonthGroup("nov-dec-jan", ("nov", "dec", "jan"), 16, "NOV-DEC-JAN")
MONTH_GROUPS = (MAY_JUN_JUL, FEB_MAR_APR_AUG_SEP_OCT, NOV_DEC_JAN)

# Grid-form layout of the fine fuel moisture table
FFM_RH_LABEL_ROW = 1
FFM_FIRST_TEMP_ROW = 3

# Grid-form layout of the correction table
CORRECTION_TIME_ROW = 1
CORRECTION_DATA_ROWS = {Shade.UNSHADED: 3, Shade.SHADED: 5}


def get_month_group(month) -> MonthGroup:
    """
    Return the month group a three letter month code belongs to.

    Raises
    ------
    InvalidMonthError
        If ``month`` is not one of 'jan' through 'dec' (case-insensitive).
    """
    code = month.strip().lower() if isinstance(month, str) else ""
    for group in MONTH_GROUPS:
        if code in group.months:
            return group
    raise InvalidMonthError(f"Invalid month selected: {month!r}.")


def match_axis(labels, value, exact_integers=False) -> int | None:
    """
    Find the single label whose range contains ``value``.

    Parameters
    ----------
    labels : list of str
        Candidate labels along one table axis. Labels that are not ranges
        are skipped.
    value : int or float
        Value to locate.
    exact_integers : bool, optional
        Also match bare integer labels (e.g. ``"100"``) by equality.

    Returns
    -------
    int or None
        Position of the matching label, or None if no label matches.

    Raises
    ------
    DataInvalidError
        If more than one label matches, meaning the axis has overlapping
        ranges.
    """
    matches = []
    for position, label in enumerate(labels):
        interval = parse_range(label)
        if interval is not None:
            if interval.contains(value):
                matches.append(position)
        elif exact_integers and _is_bare_integer(label):
            if parse_integer(label) == value:
                matches.append(position)

    if len(matches) > 1:
        raise DataInvalidError(
            f"Value {value} matches overlapping labels "
            f"{[labels[m] for m in matches]}."
        )
    return matches[0] if matches else None


def _is_bare_integer(label) -> bool:
    return isinstance(label, str) and label.strip().lstrip("+-").isdigit()


def read_integer(table: Table, row: int, col, description: str) -> int:
    """Read the integer at a cell, raising DataInvalidError if there is none."""
    value = parse_integer(table.cell_at(row, col))
    if value is None:
        raise DataInvalidError(
            f"Could not find a valid {description} in table '{table.name}' "
            f"at row {row}, column {col!r}."
        )
    return value


def calculate_reference_fuel_moisture(
    dry_bulb_temp, relative_humidity, table: Table
) -> int:
    """
    Resolve the reference fuel moisture (Table A) for a temperature and
    relative humidity.

    Parameters
    ----------
    dry_bulb_temp : int
        Dry bulb temperature in Fahrenheit.
    relative_humidity : int
        Relative humidity as a percentage.
    table : Table
        The fine fuel moisture table, in grid or labeled form.

    Returns
    -------
    int
        The reference fuel moisture as a percentage.

    Raises
    ------
    OutOfRangeError
        If the temperature or the humidity is outside every range on its axis.
    DataInvalidError
        If the intersecting cell is not an integer.
    """
    if table.labeled:
        first_temp_row = 0
        rh_labels = [str(c) for c in table.columns]
        if rh_labels:
            rh_labels[0] = ""  # temperature label column
    else:
        first_temp_row = FFM_FIRST_TEMP_ROW
        rh_labels = table.row(FFM_RH_LABEL_ROW)

    temp_labels = table.column(0)[first_temp_row:]
    temp_index = match_axis(temp_labels, dry_bulb_temp, exact_integers=True)
    if temp_index is None:
        raise OutOfRangeError(f"Temperature {dry_bulb_temp} is out of range.")

    rh_col = match_axis(rh_labels, relative_humidity, exact_integers=True)
    if rh_col is None:
        raise OutOfRangeError(f"Relative humidity {relative_humidity} is out of range.")

    return read_integer(
        table, first_temp_row + temp_index, rh_col, "fine fuel moisture value"
    )


def calculate_fuel_moisture_correction(month, time, shade, table: Table) -> int:
    """
    Resolve the fuel moisture correction (Tables B, C, D) for a month, time
    of day and shade condition.

    Parameters
    ----------
    month : str
        Three letter month code, e.g. 'jul'.
    time : str
        Time of day label. Must equal one of the time labels of the month
        group's block, e.g. '1200-1300'.
    shade : Shade or str
        'unshaded' or 'shaded'.
    table : Table
        The FFM correction table, in grid or labeled form.

    Returns
    -------
    int
        The correction to add to the reference fuel moisture.

    Raises
    ------
    InvalidMonthError
        If the month does not belong to a month group.
    InvalidTimeError
        If the time label is not present for that month group.
    DataInvalidError
        If the table lacks the month group's section or the correction cell
        is not an integer.
    """
    group = get_month_group(month)
    shade = Shade(shade)
    if not time:
        raise InvalidTimeError("Invalid time selected.")

    if table.labeled:
        row, col = _locate_labeled_correction(group, time, shade, table)
    else:
        row = CORRECTION_DATA_ROWS[shade]
        col = table.find_column_index(
            lambda label: label == time,
            row=CORRECTION_TIME_ROW,
            start=group.column_offset,
        )
        if col is None:
            raise InvalidTimeError(f"Invalid time selected: {time!r}.")

    return read_integer(table, row, col, "correction value")


def _locate_labeled_correction(group, time, shade, table):
    anchor = locate_marker_row(table, contains_marker(group.marker))
    if anchor is None:
        raise DataInvalidError(
            f"Month group '{group.marker}' not found in table '{table.name}'."
        )

    # The block ends where the next month group begins
    other_markers = [g.marker for g in MONTH_GROUPS if g != group]
    block_end = table.find_row_index_after(
        anchor, lambda cells: any(m in c for m in other_markers for c in cells)
    )
    if block_end is None:
        block_end = table.n_rows

    shade_row = locate_marker_row(table, contains_marker(shade.marker), anchor + 1)
    if shade_row is None or shade_row >= block_end:
        raise DataInvalidError(
            f"Shade condition '{shade.marker}' not found under "
            f"'{group.marker}' in table '{table.name}'."
        )

    col = table.find_column_index(lambda label: label == time)
    if col is None:
        raise InvalidTimeError(f"Invalid time selected: {time!r}.")

    return shade_row + 1, col


def calculate_1hr_fuel_moisture(
    dry_bulb_temp,
    relative_humidity,
    month,
    time,
    shade,
    moisture_table: Table,
    correction_table: Table,
) -> int:
    """Calculate the 1-hour fine dead fuel moisture content.

    The reference fuel moisture from Table A plus the month-group correction
    from Tables B, C or D.

    Examples
    --------
    >>> from fireweather_core.ref_data import TABLE_SOURCES
    >>> from fireweather_core.tables import load_tables
    >>> tables = load_tables(TABLE_SOURCES)
    >>> calculate_1hr_fuel_moisture(
    ...     75,
    ...     35,
    ...     "jul",
    ...     "1200-1300",
    ...     "unshaded",
    ...     tables["fine_fuel_moisture"],
    ...     tables["ffm_correction"],
    ... )
    5
    """
    get_month_group(month)
    reference = calculate_reference_fuel_moisture(
        dry_bulb_temp, relative_humidity, moisture_table
    )
    correction = calculate_fuel_moisture_correction(
        month, time, shade, correction_table
    )
    logger.debug(
        "Reference %d + correction %d = FFM %d",
        reference,
        correction,
        reference + correction,
    )
    return reference + correction
