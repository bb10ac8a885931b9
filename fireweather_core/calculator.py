"""
Fine fuel moisture and probability of ignition calculator.

Combines the reference tables into one calculation:

    1. reference fuel moisture (temperature x relative humidity)
    2. plus the correction (month group x shade x time of day)
    3. gives the fine fuel moisture (FFM)
    4. which, with the temperature and shade, gives the probability of
       ignition (PIG)

The three tables are loaded once per request and discarded afterwards.
Every failure aborts the whole calculation; there are no partial results.
"""

# Core imports
from __future__ import annotations
import logging
import math
from typing import Mapping, NamedTuple

# Internal imports
from fireweather_core.exceptions import (
    DataInvalidError,
    InvalidTimeError,
    OutOfRangeError,
)
from fireweather_core.fuel_moisture.fosberg import (
    Shade,
    calculate_1hr_fuel_moisture,
    get_month_group,
)
from fireweather_core.ignition.probability import calculate_probability_of_ignition
from fireweather_core.ref_data import (
    FFM_CORRECTION,
    FINE_FUEL_MOISTURE,
    PROBABILITY_OF_IGNITION,
    TABLE_SOURCES,
    TableSource,
)
from fireweather_core.tables import Table, load_tables

# External imports
import numpy as np
from pandas import DataFrame
from pandera import DataFrameSchema, Column, Check

logger = logging.getLogger(__name__)


class WeatherObservation:
    """
    Weather conditions observed at the site of interest.

    Parameters
    ----------
    dry_bulb_temp : int
        Dry bulb temperature in Fahrenheit.
    relative_humidity : int
        Relative humidity as a percentage (0-100).
    month : str
        Three letter month code, e.g. 'jul'.
    time_of_day : str
        Time of day label as it appears in the correction table,
        e.g. '1200-1300'.
    shade : Shade or str, optional
        'unshaded' (<50% canopy or cloud cover) or 'shaded' (>50%). By
        default, 'unshaded'.

    Raises
    ------
    ValueError
        If ``shade`` is not a valid shade condition.
    """

    def __init__(
        self,
        dry_bulb_temp,
        relative_humidity,
        month: str,
        time_of_day: str,
        shade: Shade = Shade.UNSHADED,
    ) -> None:
        self.dry_bulb_temp = dry_bulb_temp
        self.relative_humidity = relative_humidity
        self.month = month
        self.time_of_day = time_of_day
        self.shade = Shade(shade)

    def __repr__(self) -> str:
        return (
            f"WeatherObservation(dry_bulb_temp={self.dry_bulb_temp!r}, "
            f"relative_humidity={self.relative_humidity!r}, month={self.month!r}, "
            f"time_of_day={self.time_of_day!r}, shade={self.shade.value!r})"
        )


class ResolutionResult(NamedTuple):
    fine_fuel_moisture: int
    ignition_probability_percent: int

    def __str__(self) -> str:
        return f"FFM {self.fine_fuel_moisture}, PIG {self.ignition_probability_percent}%"


OBSERVATION_SCHEMA = DataFrameSchema(
    columns={
        "DRY_BULB_TEMP": Column(
            int,
            title="Dry Bulb Temperature (F)",
        ),
        "RELATIVE_HUMIDITY": Column(
            int,
            title="Relative Humidity (%)",
        ),
        "MONTH": Column(
            str,
            title="Month",
            description="Three letter month code, e.g. 'jul'",
        ),
        "TIME": Column(
            str,
            title="Time of Day",
            description="Time of day label of the correction table, e.g. '1200-1300'",
        ),
        "SHADE": Column(
            str,
            checks=Check.isin([s.value for s in Shade]),
            title="Shade",
            description="unshaded = <50% shaded, shaded = >50% shaded",
        ),
    },
    coerce=True,
)


def _as_integer(value, description: str) -> int:
    """Whole-number part of a finite numeric input; fractions are truncated."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        raise OutOfRangeError(f"Invalid {description} input: {value!r}.")
    return int(number)


def _get_table(tables: Mapping[str, Table], name: str) -> Table:
    try:
        return tables[name]
    except KeyError:
        raise DataInvalidError(f"Reference table '{name}' was not provided.")


def resolve_with_tables(
    observation: WeatherObservation, tables: Mapping[str, Table]
) -> ResolutionResult:
    """
    Calculate the fine fuel moisture and probability of ignition from
    already loaded reference tables.

    Parameters
    ----------
    observation : WeatherObservation
        The observed weather conditions.
    tables : Mapping[str, Table]
        The 'fine_fuel_moisture', 'ffm_correction' and
        'probability_of_ignition' tables.

    Returns
    -------
    ResolutionResult

    Raises
    ------
    ResolutionError
        The most specific error of the step that failed. See
        :mod:`fireweather_core.exceptions`.
    """
    dry_bulb_temp = _as_integer(observation.dry_bulb_temp, "temperature")
    relative_humidity = _as_integer(
        observation.relative_humidity, "relative humidity"
    )
    if not observation.time_of_day:
        raise InvalidTimeError("Invalid time selected.")
    get_month_group(observation.month)

    moisture_table = _get_table(tables, FINE_FUEL_MOISTURE)
    correction_table = _get_table(tables, FFM_CORRECTION)
    ignition_table = _get_table(tables, PROBABILITY_OF_IGNITION)

    ffm = calculate_1hr_fuel_moisture(
        dry_bulb_temp,
        relative_humidity,
        observation.month,
        observation.time_of_day,
        observation.shade,
        moisture_table,
        correction_table,
    )

    pig = calculate_probability_of_ignition(
        dry_bulb_temp, ffm, observation.shade, ignition_table
    )
    logger.debug("%r: FFM %d, PIG %d%%", observation, ffm, pig)
    return ResolutionResult(ffm, pig)


def resolve(
    observation: WeatherObservation, sources: Mapping[str, TableSource] = None
) -> ResolutionResult:
    """
    Calculate the fine fuel moisture and probability of ignition for an
    observation.

    Loads the three reference tables in parallel, then resolves the
    observation against them.

    Parameters
    ----------
    observation : WeatherObservation
        The observed weather conditions.
    sources : Mapping[str, TableSource], optional
        Where to load the reference tables from. By default, the tables
        bundled with the package.

    Returns
    -------
    ResolutionResult

    Raises
    ------
    LoadFailureError
        If any of the reference tables fails to load. No lookup is attempted.
    ResolutionError
        If the observation cannot be resolved.

    Examples
    --------
    >>> result = resolve(WeatherObservation(75, 35, "jul", "1200-1300", "unshaded"))
    >>> print(result)
    FFM 5, PIG 60%
    """
    tables = load_tables(TABLE_SOURCES if sources is None else sources)
    return resolve_with_tables(observation, tables)


def resolve_many(
    observations: DataFrame, sources: Mapping[str, TableSource] = None
) -> DataFrame:
    """
    Calculate the fine fuel moisture and probability of ignition for every
    row of a DataFrame of observations.

    The reference tables are loaded once for the whole batch. A row that
    cannot be resolved fails the whole batch.

    Parameters
    ----------
    observations : DataFrame
        Observations with the columns of ``OBSERVATION_SCHEMA``:
        DRY_BULB_TEMP, RELATIVE_HUMIDITY, MONTH, TIME and SHADE.
    sources : Mapping[str, TableSource], optional
        Where to load the reference tables from.

    Returns
    -------
    DataFrame
        A copy of the observations with FFM and PIG columns added.
    """
    df = OBSERVATION_SCHEMA.validate(observations)
    tables = load_tables(TABLE_SOURCES if sources is None else sources)

    results = [
        resolve_with_tables(
            WeatherObservation(
                row.DRY_BULB_TEMP,
                row.RELATIVE_HUMIDITY,
                row.MONTH,
                row.TIME,
                row.SHADE,
            ),
            tables,
        )
        for row in df.itertuples(index=False)
    ]

    df = df.copy()
    df["FFM"] = np.array([r.fine_fuel_moisture for r in results], dtype=int)
    df["PIG"] = np.array([r.ignition_probability_percent for r in results], dtype=int)
    return df
