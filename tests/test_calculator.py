# Core imports
from pathlib import Path

# Internal imports
from fireweather_core import calculator
from fireweather_core.calculator import (
    ResolutionResult,
    WeatherObservation,
    resolve,
    resolve_many,
    resolve_with_tables,
)
from fireweather_core.exceptions import (
    DataInvalidError,
    InvalidMonthError,
    InvalidTimeError,
    LoadFailureError,
    OutOfRangeError,
    ResolutionError,
)
from fireweather_core.fuel_moisture.fosberg import Shade
from fireweather_core.ref_data import TABLE_SOURCES, TableSource
from fireweather_core.tables import Table, load_tables
from tests.utils import TIMES, make_correction_labeled, make_tables

# External imports
import pytest
import pandas as pd
from pandera.errors import SchemaError


@pytest.fixture(scope="module")
def bundled():
    return load_tables(TABLE_SOURCES)


class TestWeatherObservation:
    def test_shade_is_coerced(self):
        obs = WeatherObservation(75, 35, "jul", "1200-1300", "shaded")
        assert obs.shade is Shade.SHADED

    def test_default_shade(self):
        assert WeatherObservation(75, 35, "jul", "1200-1300").shade is Shade.UNSHADED

    def test_invalid_shade(self):
        with pytest.raises(ValueError):
            WeatherObservation(75, 35, "jul", "1200-1300", "partly")


class TestResolveWithTables:
    def test_july_scenario(self, bundled):
        obs = WeatherObservation(75, 35, "jul", "1200-1300", "unshaded")
        result = resolve_with_tables(obs, bundled)
        assert result == ResolutionResult(5, 60)
        assert 0 <= result.ignition_probability_percent <= 100
        assert str(result) == "FFM 5, PIG 60%"

    def test_final_ffm_is_base_plus_correction(self, bundled):
        obs = WeatherObservation(40, 95, "dec", "0800-1000", "shaded")
        result = resolve_with_tables(obs, bundled)
        # Reference 13 + correction 5 = 18, clamped to the 17 column for PIG
        assert result.fine_fuel_moisture == 18
        assert result.ignition_probability_percent == 10

    def test_synthetic_tables(self):
        tables = make_tables()
        obs = WeatherObservation(70, 15, "aug", TIMES[1], "shaded")
        # Reference 5 + correction 16 = 21, clamped to 17
        assert resolve_with_tables(obs, tables) == ResolutionResult(21, 60 - 15)

    def test_labeled_correction_table(self):
        grid = resolve_with_tables(
            WeatherObservation(70, 15, "aug", TIMES[1], "shaded"), make_tables()
        )
        labeled = resolve_with_tables(
            WeatherObservation(70, 15, "aug", TIMES[1], "shaded"),
            make_tables(correction=make_correction_labeled()),
        )
        assert grid == labeled

    def test_deterministic(self, bundled):
        obs = WeatherObservation(88, 12, "apr", "1400-1600", "unshaded")
        results = {resolve_with_tables(obs, bundled) for _ in range(5)}
        assert len(results) == 1

    def test_invalid_month_scans_no_table(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("No table should be scanned")

        monkeypatch.setattr(calculator, "calculate_1hr_fuel_moisture", fail)
        monkeypatch.setattr(calculator, "calculate_probability_of_ignition", fail)
        obs = WeatherObservation(75, 35, "xyz", "1200-1300", "unshaded")
        with pytest.raises(InvalidMonthError):
            resolve_with_tables(obs, make_tables())

    def test_out_of_range_temperature(self, bundled):
        obs = WeatherObservation(500, 35, "jul", "1200-1300", "unshaded")
        with pytest.raises(OutOfRangeError):
            resolve_with_tables(obs, bundled)

    def test_cold_temperature(self, bundled):
        obs = WeatherObservation(5, 35, "jul", "1200-1300", "unshaded")
        with pytest.raises(OutOfRangeError):
            resolve_with_tables(obs, bundled)

    @pytest.mark.parametrize("temp, rh", [(float("nan"), 30), (70, None), ("warm", 30)])
    def test_invalid_numbers(self, bundled, temp, rh):
        with pytest.raises(OutOfRangeError):
            resolve_with_tables(WeatherObservation(temp, rh, "jul", "1200-1300"), bundled)

    @pytest.mark.parametrize(
        "temp, rh, whole_temp, whole_rh",
        [(29.5, 35, 29, 35), (75, 4.5, 75, 4), (75, 99.5, 75, 99), (75.5, 35, 75, 35)],
    )
    def test_fractional_numbers_are_truncated(
        self, bundled, temp, rh, whole_temp, whole_rh
    ):
        result = resolve_with_tables(
            WeatherObservation(temp, rh, "jul", "1200-1300"), bundled
        )
        expected = resolve_with_tables(
            WeatherObservation(whole_temp, whole_rh, "jul", "1200-1300"), bundled
        )
        assert (
            result == expected
        ), f"({temp}, {rh}) resolved to {result}, expected {expected}"

    def test_numeric_strings_are_accepted(self, bundled):
        obs = WeatherObservation("75", "35.9", "jul", "1200-1300")
        assert resolve_with_tables(obs, bundled) == ResolutionResult(5, 60)

    def test_fine_fuel_moisture_gets_whole_inputs(self, monkeypatch, bundled):
        calls = []

        def record(*args):
            calls.append(args)
            return 5

        monkeypatch.setattr(calculator, "calculate_1hr_fuel_moisture", record)
        obs = WeatherObservation(75.9, 35.2, "jul", "1200-1300", "shaded")
        assert resolve_with_tables(obs, bundled).fine_fuel_moisture == 5
        assert len(calls) == 1
        temp, rh, month, time, shade, moisture, correction = calls[0]
        assert (temp, rh, month, time) == (75, 35, "jul", "1200-1300")
        assert shade is Shade.SHADED
        assert moisture is bundled["fine_fuel_moisture"]
        assert correction is bundled["ffm_correction"]

    @pytest.mark.parametrize("time", ["", None, "noon"])
    def test_invalid_time(self, bundled, time):
        with pytest.raises(InvalidTimeError):
            resolve_with_tables(WeatherObservation(75, 35, "jul", time), bundled)

    def test_missing_table(self, bundled):
        tables = dict(bundled)
        del tables["probability_of_ignition"]
        with pytest.raises(DataInvalidError):
            resolve_with_tables(WeatherObservation(75, 35, "jul", "1200-1300"), tables)

    def test_malformed_table_aborts(self, bundled):
        tables = dict(bundled)
        tables["probability_of_ignition"] = Table.from_rows([["no sections"]])
        with pytest.raises(DataInvalidError):
            resolve_with_tables(WeatherObservation(75, 35, "jul", "1200-1300"), tables)

    def test_errors_are_resolution_errors(self, bundled):
        with pytest.raises(ResolutionError):
            resolve_with_tables(WeatherObservation(75, 35, "xyz", "1200-1300"), bundled)


class TestResolve:
    def test_bundled_tables(self):
        result = resolve(WeatherObservation(75, 35, "jul", "1200-1300", "unshaded"))
        assert result == ResolutionResult(5, 60)

    def test_load_failure_runs_no_resolver(self, monkeypatch, tmp_path: Path):
        calls = []
        monkeypatch.setattr(
            calculator, "resolve_with_tables", lambda *args: calls.append(args)
        )
        sources = dict(TABLE_SOURCES)
        sources["fine_fuel_moisture"] = TableSource(
            "fine_fuel_moisture", str(tmp_path / "missing.csv"), labeled=True
        )
        with pytest.raises(LoadFailureError):
            resolve(WeatherObservation(75, 35, "jul", "1200-1300"), sources)
        assert calls == []


class TestResolveMany:
    def test_batch(self):
        observations = pd.DataFrame(
            {
                "DRY_BULB_TEMP": [75, 40, 105],
                "RELATIVE_HUMIDITY": [35, 95, 10],
                "MONTH": ["jul", "dec", "sep"],
                "TIME": ["1200-1300", "0800-1000", "1400-1600"],
                "SHADE": ["unshaded", "shaded", "unshaded"],
            }
        )
        result = resolve_many(observations)
        assert list(result["FFM"]) == [5, 18, 3]
        assert list(result["PIG"]) == [60, 10, 90]
        assert "FFM" not in observations.columns

    def test_failure_aborts_batch(self):
        observations = pd.DataFrame(
            {
                "DRY_BULB_TEMP": [75, 500],
                "RELATIVE_HUMIDITY": [35, 35],
                "MONTH": ["jul", "jul"],
                "TIME": ["1200-1300", "1200-1300"],
                "SHADE": ["unshaded", "unshaded"],
            }
        )
        with pytest.raises(OutOfRangeError):
            resolve_many(observations)

    def test_schema(self):
        observations = pd.DataFrame(
            {
                "DRY_BULB_TEMP": [75],
                "RELATIVE_HUMIDITY": [35],
                "MONTH": ["jul"],
                "TIME": ["1200-1300"],
                "SHADE": ["partly"],
            }
        )
        with pytest.raises(SchemaError):
            resolve_many(observations)
