# Internal imports
from fireweather_core.fuel_moisture.fosberg import MONTH_GROUPS
from fireweather_core.tables import Table

TIMES = ["0800-1200", "1200-1600"]


def make_moisture_grid():
    """Small grid-form moisture table with a bare integer humidity column."""
    return Table.from_rows(
        [
            ["Reference Fuel Moisture", "", "", ""],
            ["RH (%)", "0-9", "10-19", "20"],
            ["Temp (F)", "", "", ""],
            ["10 to 49", "1", "2", "3"],
            ["50 to 89", "4", "5", "6"],
            ["90 +", "7", "8", "9"],
        ],
        name="moisture",
    )


def make_moisture_labeled():
    """The same moisture table in labeled form."""
    columns = ["Temp (F)", "0-9", "10-19", "20"]
    rows = [
        ["10 to 49", "1", "2", "3"],
        ["50 to 89", "4", "5", "6"],
        ["90 +", "7", "8", "9"],
    ]
    return Table.from_records(
        [dict(zip(columns, r)) for r in rows], columns=columns, name="moisture"
    )


def correction_values(group_index):
    """Distinct (unshaded, shaded) corrections for each month group."""
    unshaded = [10 * group_index + 1, 10 * group_index + 2]
    shaded = [10 * group_index + 5, 10 * group_index + 6]
    return unshaded, shaded


def make_correction_grid():
    """Grid-form correction table with three 8-column month-group blocks."""
    rows = [[""] * 24 for _ in range(6)]
    for i, group in enumerate(MONTH_GROUPS):
        offset = group.column_offset
        unshaded, shaded = correction_values(i)
        rows[0][offset] = group.marker
        rows[1][offset] = "Time"
        rows[2][offset] = "UNSHADED <50%"
        rows[4][offset] = "SHADED >50%"
        for j, time in enumerate(TIMES):
            rows[1][offset + 1 + j] = time
            rows[3][offset + 1 + j] = str(unshaded[j])
            rows[5][offset + 1 + j] = str(shaded[j])
    return Table.from_rows(rows, name="correction")


def make_correction_labeled(groups=MONTH_GROUPS):
    """Labeled-form correction table stacking one block per month group."""
    columns = ["Condition", *TIMES]
    rows = []
    for group in groups:
        unshaded, shaded = correction_values(MONTH_GROUPS.index(group))
        rows.append([group.marker, "", ""])
        rows.append(["UNSHADED <50%", "", ""])
        rows.append(["", *map(str, unshaded)])
        rows.append(["SHADED >50%", "", ""])
        rows.append(["", *map(str, shaded)])
    return Table.from_records(
        [dict(zip(columns, r)) for r in rows], columns=columns, name="correction"
    )


def make_pig_section(marker, base):
    header = ["Temp (F)", *[str(v) for v in range(2, 18)]]
    rows = [[marker] + [""] * 16, header]
    for k, label in enumerate(["60 +", "30-59", "10-29"]):
        rows.append([label, *[str(base - k * 10 - v) for v in range(16)]])
    return rows


def make_pig_grid(shaded_first=False):
    """
    Grid-form PIG table. Unshaded cells count down from 90, shaded cells
    count down from 60, one per moisture column and ten per temperature row.
    """
    unshaded = make_pig_section("UNSHADED <50%", 90)
    shaded = make_pig_section("SHADED >50%", 60)
    sections = [shaded, unshaded] if shaded_first else [unshaded, shaded]
    rows = [["Probability of Ignition"] + [""] * 16]
    rows += sections[0]
    rows.append([""] * 17)
    rows += sections[1]
    return Table.from_rows(rows, name="pig")


def make_tables(correction=None):
    return {
        "fine_fuel_moisture": make_moisture_grid(),
        "ffm_correction": correction or make_correction_grid(),
        "probability_of_ignition": make_pig_grid(),
    }
