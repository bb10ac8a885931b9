# Core imports
from __future__ import annotations
from importlib.resources import files
from typing import NamedTuple


class TableSource(NamedTuple):
    """Where a reference table lives and whether its first row is a header."""

    name: str
    path: str
    labeled: bool = False


FINE_FUEL_MOISTURE = "fine_fuel_moisture"
FFM_CORRECTION = "ffm_correction"
PROBABILITY_OF_IGNITION = "probability_of_ignition"

DATA_PATH = files("fireweather_core.data")
TABLE_SOURCES = {
    FINE_FUEL_MOISTURE: TableSource(
        FINE_FUEL_MOISTURE,
        str(DATA_PATH / "fine_fuel_moisture.csv"),
        labeled=True,
    ),
    FFM_CORRECTION: TableSource(
        FFM_CORRECTION,
        str(DATA_PATH / "ffm_correction.csv"),
    ),
    PROBABILITY_OF_IGNITION: TableSource(
        PROBABILITY_OF_IGNITION,
        str(DATA_PATH / "probability_of_ignition.csv"),
    ),
}
