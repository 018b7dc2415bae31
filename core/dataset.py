"""
dataset module
immutable tabular snapshot handed to every analysis
extracts numeric series from named columns
"""

import numbers
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, List, Mapping, Sequence, Tuple

import numpy as np
import pandas as pd

from core.exceptions import ColumnNotFoundError, DataError, EmptyVariableError


# ============================================================================
#                              CELL PARSING
# ============================================================================

def to_number(cell: Any) -> float:
    # parse single cell to float, nan when not a finite number
    if cell is None or isinstance(cell, (bool, np.bool_)):
        return np.nan

    if isinstance(cell, numbers.Real):
        value = float(cell)
    elif isinstance(cell, str):
        text = cell.strip()
        if not text:
            return np.nan
        value = float(pd.to_numeric(text, errors="coerce"))
    else:
        return np.nan

    return value if np.isfinite(value) else np.nan


def is_present(cell: Any) -> bool:
    # cell holds something other than null or blank text
    if cell is None:
        return False
    if isinstance(cell, str):
        return bool(cell.strip())
    if isinstance(cell, numbers.Real) and not isinstance(cell, (bool, np.bool_)):
        return not np.isnan(float(cell))
    return True


def to_label(cell: Any) -> str:
    # text label for identifier cells
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    return str(cell).strip()


# ============================================================================
#                               DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class NumericSeries:
    # finite numbers extracted from one column in row order
    name: str
    values: Tuple[float, ...]

    def __len__(self) -> int:
        return len(self.values)

    @property
    def is_empty(self) -> bool:
        return len(self.values) == 0

    def as_array(self) -> np.ndarray:
        return np.asarray(self.values, dtype=float)

    def require_values(self, role: str = "variable") -> "NumericSeries":
        # fail instead of analysing an empty series
        if self.is_empty:
            raise EmptyVariableError(self.name, role)
        return self


@dataclass(frozen=True)
class DatasetView:
    # read-only column names plus row-major cells
    columns: Tuple[str, ...]
    rows: Tuple[Tuple[Any, ...], ...]
    _index: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        columns = tuple(str(c) for c in self.columns)
        index = {}
        for position, name in enumerate(columns):
            if name in index:
                raise DataError(f"duplicate column name '{name}'", name)
            index[name] = position

        # pad ragged rows so every row matches the header
        width = len(columns)
        rows = []
        for row_number, row in enumerate(self.rows):
            cells = tuple(row)
            if len(cells) > width:
                raise DataError(
                    f"row {row_number} has {len(cells)} cells but only {width} columns"
                )
            rows.append(cells + (None,) * (width - len(cells)))

        object.__setattr__(self, "columns", columns)
        object.__setattr__(self, "rows", tuple(rows))
        object.__setattr__(self, "_index", MappingProxyType(index))

    # ---------- CONSTRUCTION ----------

    @classmethod
    def from_rows(cls, columns: Sequence[str], rows: Iterable[Sequence[Any]]) -> "DatasetView":
        # build view from header list and row lists
        return cls(tuple(columns), tuple(tuple(r) for r in rows))

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "DatasetView":
        # build view from dataframe snapshot
        cleaned = df.astype(object).where(df.notna(), None)
        rows = cleaned.itertuples(index=False, name=None)
        return cls(tuple(df.columns), tuple(rows))

    def to_dataframe(self) -> pd.DataFrame:
        # copy of the snapshot as dataframe
        return pd.DataFrame(list(self.rows), columns=list(self.columns))

    # ---------- SHAPE ----------

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def iter_rows(self) -> Iterator[Tuple[Any, ...]]:
        return iter(self.rows)

    # ---------- COLUMN ACCESS ----------

    def has_column(self, name: str) -> bool:
        return name in self._index

    def column_index(self, name: str, role: str = "column") -> int:
        # stable position of named column
        try:
            return self._index[name]
        except KeyError:
            raise ColumnNotFoundError(name, role) from None

    def column_values(self, name: str, role: str = "column") -> List[Any]:
        # raw cells of column in row order
        idx = self.column_index(name, role)
        return [row[idx] for row in self.rows]

    def numeric_cells(self, name: str, role: str = "column") -> np.ndarray:
        # row aligned floats with nan for non numeric cells
        return np.array([to_number(cell) for cell in self.column_values(name, role)], dtype=float)

    def numeric_series(self, name: str, role: str = "column") -> NumericSeries:
        # numeric values of column with non numeric cells dropped
        cells = self.numeric_cells(name, role)
        values = cells[~np.isnan(cells)]
        return NumericSeries(name=name, values=tuple(float(v) for v in values))

    def numeric_columns(self) -> List[str]:
        # columns holding at least one numeric cell
        numeric = []
        for name in self.columns:
            if not np.isnan(self.numeric_cells(name)).all():
                numeric.append(name)
        return numeric

    def require_columns(self, names: Sequence[str], role: str = "column") -> List[int]:
        # positions of every named column, first missing one raises
        return [self.column_index(name, role) for name in names]


def as_dataset(data: Any) -> DatasetView:
    # accept a view or a dataframe
    if isinstance(data, DatasetView):
        return data
    if isinstance(data, pd.DataFrame):
        return DatasetView.from_dataframe(data)
    raise TypeError(f"expected DatasetView or DataFrame, got {type(data).__name__}")

