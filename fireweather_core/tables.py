"""
In-memory reference tables.

The charts were transcribed to CSV without any separate metadata, so header
rows, section titles and blank separator rows all live in the data itself.
:class:`Table` normalizes a loaded chart into rows of string cells and offers
the small set of read-only scans the resolvers need to find that structure at
runtime. A table is held in one of two forms:

    - grid form: no header, every source row is a row, columns are positions
    - labeled form: the first source row holds the column labels

Both forms address cells by row index and column position; labeled tables can
also address columns by label.
"""

# Core imports
from __future__ import annotations
import logging
from typing import Callable, Mapping, Sequence

# Internal imports
from fireweather_core.exceptions import LoadFailureError
from fireweather_core.ref_data import TableSource

# External imports
import dask
import pandas as pd
from pandas import DataFrame

logger = logging.getLogger(__name__)

RowPredicate = Callable[[list], bool]
CellPredicate = Callable[[str], bool]


class Table:
    """
    A read-only reference table of string cells.

    Parameters
    ----------
    data : DataFrame
        Table contents. Missing values are read as empty strings.
    name : str, optional
        Logical table name, used in error messages.
    labeled : bool, optional
        True if the DataFrame columns are the chart's column labels. False
        (grid form) discards the column labels and addresses columns by
        position only.
    """

    def __init__(self, data: DataFrame, name: str = "", labeled: bool = False):
        data = data.fillna("").astype(str)
        if labeled:
            data.columns = [str(c).strip() for c in data.columns]
        else:
            data.columns = range(data.shape[1])
        self.data = data.reset_index(drop=True)
        self.name = name
        self.labeled = labeled

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence], name: str = "") -> Table:
        """Build a grid-form table from a list of rows. Short rows are padded."""
        return cls(DataFrame([list(r) for r in rows]), name=name, labeled=False)

    @classmethod
    def from_records(
        cls, records: Sequence[Mapping], columns: Sequence[str] = None, name: str = ""
    ) -> Table:
        """Build a labeled-form table from a list of ``{label: cell}`` rows."""
        return cls(DataFrame(list(records), columns=columns), name=name, labeled=True)

    def __len__(self) -> int:
        return self.n_rows

    def __repr__(self) -> str:
        form = "labeled" if self.labeled else "grid"
        return f"Table(name={self.name!r}, form={form}, shape={self.data.shape})"

    @property
    def n_rows(self) -> int:
        return self.data.shape[0]

    @property
    def n_cols(self) -> int:
        return self.data.shape[1]

    @property
    def columns(self) -> list:
        """Column labels in labeled form, column positions in grid form."""
        return list(self.data.columns)

    def row(self, index: int) -> list[str]:
        if not 0 <= index < self.n_rows:
            return []
        return list(self.data.iloc[index])

    def column(self, col: int | str) -> list[str]:
        position = self._column_position(col)
        if position is None:
            return []
        return list(self.data.iloc[:, position])

    def cell_at(self, row: int, col: int | str) -> str:
        """
        Return the cell at ``row`` and ``col``.

        ``col`` is a column position, or a column label for labeled tables.
        Cells outside the table read as an empty string.
        """
        position = self._column_position(col)
        if position is None or not 0 <= row < self.n_rows:
            return ""
        return self.data.iat[row, position]

    def row_contains(self, row: int, marker: str) -> bool:
        """Return True if any cell of ``row`` contains ``marker`` as a substring."""
        return any(marker in cell for cell in self.row(row))

    def find_row_index(self, predicate: RowPredicate, start: int = 0) -> int | None:
        """
        Return the index of the first row at or after ``start`` whose list of
        cells satisfies ``predicate``, or None.
        """
        for index in range(max(start, 0), self.n_rows):
            if predicate(self.row(index)):
                return index
        return None

    def find_row_index_after(
        self, start_index: int, predicate: RowPredicate
    ) -> int | None:
        """Like :meth:`find_row_index`, scanning only rows after ``start_index``."""
        return self.find_row_index(predicate, start=start_index + 1)

    def find_column_index(
        self, predicate: CellPredicate, row: int | None = None, start: int = 0
    ) -> int | None:
        """
        Return the position of the first column at or after ``start`` whose
        label satisfies ``predicate``.

        With ``row`` set, the cells of that row are tested instead of the
        column labels. Grid tables have no labels, so ``row`` is required.
        """
        if row is None:
            if not self.labeled:
                raise ValueError("Grid tables have no column labels; pass a row.")
            candidates = [str(c) for c in self.columns]
        else:
            candidates = self.row(row)

        for position in range(max(start, 0), len(candidates)):
            if predicate(candidates[position]):
                return position
        return None

    def _column_position(self, col: int | str) -> int | None:
        if isinstance(col, str):
            if not self.labeled or col not in self.data.columns:
                return None
            return self.columns.index(col)
        if not 0 <= col < self.n_cols:
            return None
        return int(col)


def contains_marker(marker: str) -> RowPredicate:
    """Row predicate matching rows with a cell containing ``marker``."""

    def predicate(cells):
        return any(marker in cell for cell in cells)

    return predicate


def locate_marker_row(
    table: Table, predicate: RowPredicate, search_start_index: int = 0
) -> int | None:
    """
    Find the first row at or after ``search_start_index`` matching
    ``predicate``.

    This is how section titles and sub-table headers are discovered in charts
    that carry their structure inside the data cells.
    """
    index = table.find_row_index(predicate, start=search_start_index)
    if index is not None:
        logger.debug(
            "Located marker row %d in table %r (search from %d)",
            index,
            table.name,
            search_start_index,
        )
    return index


def load_table(source: TableSource) -> Table:
    """
    Read a reference table from CSV.

    Parameters
    ----------
    source : TableSource
        Table name, path (or URL) and form.

    Returns
    -------
    Table

    Raises
    ------
    LoadFailureError
        If the source cannot be read or parsed.
    """
    return _read_table(source.name, source.path, source.labeled)


def _read_table(name: str, path: str, labeled: bool) -> Table:
    logger.debug("Loading table %r from %s", name, path)
    try:
        data = pd.read_csv(
            path,
            header=0 if labeled else None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
        )
    except (OSError, ValueError) as e:
        raise LoadFailureError(f"Failed to load table '{name}' from {path}: {e}") from e
    return Table(data, name=name, labeled=labeled)


def load_tables(sources: Mapping[str, TableSource]) -> dict[str, Table]:
    """
    Load several reference tables in parallel.

    The loads run independently on the threaded dask scheduler. The call
    returns only once all of them have finished. If any load fails, the other
    results are discarded and the failure is raised.

    Parameters
    ----------
    sources : Mapping[str, TableSource]
        Logical table name to table source.

    Returns
    -------
    dict[str, Table]
        Logical table name to loaded table.

    Raises
    ------
    LoadFailureError
        If any of the tables fails to load.
    """
    names = list(sources)
    tasks = [
        dask.delayed(_read_table)(
            name, sources[name].path, sources[name].labeled
        )
        for name in names
    ]
    loaded = dask.compute(*tasks, scheduler="threads")
    return dict(zip(names, loaded))
