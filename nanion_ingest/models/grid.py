from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import pandas as pd

"""RawGrid model: the untyped cell grid read from one workbook.

Cells keep whatever type the spreadsheet parser produced (str, int, float,
datetime ...). Missing cells are normalised to ``None`` once, at construction
time, so equality between grids and rows behaves (NaN != NaN otherwise).
"""

__all__ = [
    "RawGrid",
    "is_missing",
]


def is_missing(value: Any) -> bool:
    """True for empty/missing cells: None, NaN/NaT and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, float) and math.isnan(value):
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True, eq=False)
class RawGrid:
    """Immutable R x C grid of heterogeneous cells, row-major.

    The wrapped DataFrame is private to the grid; callers go through the
    accessors below, which never hand out the frame itself.
    """
    _frame: pd.DataFrame

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> RawGrid:
        cleaned = frame.astype(object)
        cleaned = cleaned.where(cleaned.notna(), None)
        cleaned = cleaned.reset_index(drop=True)
        cleaned.columns = range(cleaned.shape[1])
        return cls(cleaned)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]]) -> RawGrid:
        """Build a grid from nested lists; short rows are padded with None."""
        return cls.from_frame(pd.DataFrame([list(r) for r in rows]))

    @property
    def shape(self) -> tuple[int, int]:
        return self._frame.shape

    @property
    def n_rows(self) -> int:
        return self._frame.shape[0]

    @property
    def n_columns(self) -> int:
        return self._frame.shape[1]

    def cell(self, row: int, column: int) -> Any:
        """Cell value, or None when the position lies outside the grid."""
        if not (0 <= row < self.n_rows and 0 <= column < self.n_columns):
            return None
        return self._frame.iat[row, column]

    def row(self, index: int) -> list[Any]:
        return self._frame.iloc[index].tolist()

    def rows(self, start: int = 0) -> list[list[Any]]:
        return self._frame.iloc[start:].values.tolist()

    def head(self, n_rows: int) -> RawGrid:
        """Header window: the first ``n_rows`` rows as a new grid."""
        return RawGrid(self._frame.iloc[:n_rows].reset_index(drop=True))

    def row_extent(self, index: int) -> int:
        """Width of a row up to (and including) its last non-missing cell."""
        values = self.row(index)
        for pos in range(len(values) - 1, -1, -1):
            if not is_missing(values[pos]):
                return pos + 1
        return 0

    def non_missing_count(self) -> int:
        return sum(1 for r in self._frame.values.tolist() for v in r if not is_missing(v))
