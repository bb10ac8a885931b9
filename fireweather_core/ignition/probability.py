"""
Probability of Ignition
=======================

Resolve the probability of ignition (PIG) from the dry bulb temperature and
the fine fuel moisture using the reference PIG chart.

The chart holds two sub-tables, one per shade condition, each introduced by
a section title row (``"UNSHADED <50%"`` or ``"SHADED >50%"``) followed by a
header row of fine fuel moisture values and then one row per temperature
range. The sections are found by scanning for their titles, so their order
and position in the table do not matter.

Module Constants
----------------
HEADER_ROWS : int
    Rows between a section title and its first temperature row, counting
    the title itself.
MIN_FFM, MAX_FFM : int
    The fine fuel moisture columns the chart covers. Moisture values outside
    this range use the nearest edge column.
"""

# Core imports
from __future__ import annotations
import math

# Internal imports
from fireweather_core.exceptions import DataInvalidError, OutOfRangeError
from fireweather_core.fuel_moisture.fosberg import (
    SHADE_MARKERS,
    Shade,
    match_axis,
    read_integer,
)
from fireweather_core.ranges import parse_integer
from fireweather_core.tables import Table, contains_marker, locate_marker_row

# External imports
import numpy as np

HEADER_ROWS = 2
MIN_FFM = 2
MAX_FFM = 17


def clamp_fine_fuel_moisture(fine_fuel_moisture) -> int:
    """
    Round a fine fuel moisture to the nearest integer (halves round up) and
    clamp it to the columns of the PIG chart.

    >>> clamp_fine_fuel_moisture(1)
    2
    >>> clamp_fine_fuel_moisture(9.5)
    10
    >>> clamp_fine_fuel_moisture(25)
    17
    """
    rounded = math.floor(float(fine_fuel_moisture) + 0.5)
    return int(np.clip(rounded, MIN_FFM, MAX_FFM))


def _locate_section(shade: Shade, table: Table) -> tuple[int, int]:
    anchors = {}
    for condition, marker in SHADE_MARKERS.items():
        anchor = locate_marker_row(table, contains_marker(marker))
        if anchor is None:
            raise DataInvalidError(
                f"Could not find the '{marker}' section in table '{table.name}'."
            )
        anchors[condition] = anchor

    start = anchors[shade]
    others = [a for c, a in anchors.items() if c != shade and a > start]
    end = min(others) if others else table.n_rows
    return start, end


def calculate_probability_of_ignition(
    dry_bulb_temp, fine_fuel_moisture, shade, table: Table
) -> int:
    """
    Resolve the probability of ignition for a temperature and fine fuel
    moisture.

    Parameters
    ----------
    dry_bulb_temp : int
        Dry bulb temperature in Fahrenheit.
    fine_fuel_moisture : int or float
        Fine fuel moisture as a percentage. Values are rounded and then
        clamped to the 2-17 columns of the chart.
    shade : Shade or str
        'unshaded' or 'shaded', selecting the sub-table.
    table : Table
        The probability of ignition table, in grid form.

    Returns
    -------
    int
        The probability of ignition as a percentage (0-100).

    Raises
    ------
    OutOfRangeError
        If the temperature is outside every range of the sub-table.
    DataInvalidError
        If a section title or the moisture column is missing, or the
        intersecting cell is not a percentage.
    """
    shade = Shade(shade)
    start, end = _locate_section(shade, table)

    header_row = start + 1
    first_row = start + HEADER_ROWS
    temp_labels = [table.cell_at(row, 0) for row in range(first_row, end)]
    temp_index = match_axis(temp_labels, dry_bulb_temp)
    if temp_index is None:
        raise OutOfRangeError(
            f"Temperature {dry_bulb_temp} is out of range for the probability "
            f"of ignition."
        )

    ffm_value = clamp_fine_fuel_moisture(fine_fuel_moisture)
    ffm_col = table.find_column_index(
        lambda label: parse_integer(label) == ffm_value, row=header_row, start=1
    )
    if ffm_col is None:
        raise DataInvalidError(
            f"Could not find the fine fuel moisture column {ffm_value} in "
            f"table '{table.name}'."
        )

    percent = read_integer(
        table, first_row + temp_index, ffm_col, "probability of ignition value"
    )
    if not 0 <= percent <= 100:
        raise DataInvalidError(
            f"Probability of ignition {percent} is not a percentage."
        )
    return percent
