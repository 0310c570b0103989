from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .protocol import ProtocolInfo

"""HeaderLayout and ParsedTable models.

ParsedTable is the per-file payload handed to downstream filtering/fitting:
positional column labels plus the verbatim data rows found below the header
block.
"""

__all__ = [
    "HeaderLayout",
    "ParsedTable",
]


@dataclass(frozen=True)
class HeaderLayout:
    """Row positions (zero-based) of the header block inside a RawGrid."""
    results_row_index: int  # row holding the results marker
    keyword_row_index: int  # row holding the parameter marker
    data_start_row_index: int  # first payload row

    def __post_init__(self) -> None:
        if self.data_start_row_index <= self.keyword_row_index:
            raise ValueError("data_start_row_index must follow keyword_row_index")
        if self.keyword_row_index <= self.results_row_index:
            raise ValueError("keyword_row_index must follow results_row_index")


@dataclass(frozen=True)
class ParsedTable:
    column_labels: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]
    source_protocol: ProtocolInfo
    layout: HeaderLayout
    header_width: int  # label count before reconciliation
    data_width: int  # widest data row before reconciliation
    severe_mismatch: bool = False

    def __post_init__(self) -> None:
        width = len(self.column_labels)
        for pos, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"row {pos} has width {len(row)}, expected {width}")

    @property
    def n_rows(self) -> int:
        return len(self.rows)

    @property
    def n_columns(self) -> int:
        return len(self.column_labels)

    @property
    def column_mismatch(self) -> bool:
        return self.header_width != self.data_width

    def column(self, label: str) -> list[Any]:
        pos = self.column_labels.index(label)
        return [row[pos] for row in self.rows]
