from __future__ import annotations

import logging

from ..models.config_models import ExtractionConfig, IngestConfig
from ..models.grid import RawGrid
from ..models.parsed_table import HeaderLayout, ParsedTable
from ..models.protocol import ProtocolInfo
from .protocol import row_search_text

"""Table extraction: locate the header block and slice out the payload.

Layout of an export below the instrument header:

    ... free-form rows ...
    <row containing "Results">
    ... optional rows ...
    <row containing "Parameter">      <- keyword row, defines the label count
    <units / sweep row>
    <data rows ...>                   <- data_offset (2) rows below keyword row

Header width and data width are measured independently and truncated to the
smaller one. Labels are positional (Column_1 ...); cells are copied verbatim.
"""

logger = logging.getLogger(__name__)

LABEL_PREFIX = "Column_"


class ExtractionError(Exception):
    error_type = "EXTRACTION_ERROR"


class HeaderNotFoundError(ExtractionError):
    error_type = "HEADER_NOT_FOUND"


class EmptyDataBlockError(ExtractionError):
    error_type = "EMPTY_DATA_BLOCK"


def _find_marker_row(grid: RawGrid, marker: str, start: int) -> int | None:
    needle = marker.lower()
    for row_index in range(start, grid.n_rows):
        if needle in row_search_text(grid.row(row_index)).lower():
            return row_index
    return None


def locate_header(grid: RawGrid, extraction: ExtractionConfig | None = None) -> HeaderLayout:
    """Find the results marker, then the parameter marker below it.

    Raises:
        HeaderNotFoundError: a marker is missing, or the data block would start
            past the last row of the grid
    """
    extraction = extraction or ExtractionConfig()
    results_row = _find_marker_row(grid, extraction.results_marker, 0)
    if results_row is None:
        raise HeaderNotFoundError(f"results marker '{extraction.results_marker}' not found")

    keyword_row = _find_marker_row(grid, extraction.parameter_marker, results_row + 1)
    if keyword_row is None:
        raise HeaderNotFoundError(
            f"parameter marker '{extraction.parameter_marker}' not found below row {results_row + 1}"
        )

    data_start = keyword_row + extraction.data_offset
    if data_start >= grid.n_rows:
        raise HeaderNotFoundError(
            f"header block ends at row {keyword_row + 1} with no data rows below it"
        )
    return HeaderLayout(
        results_row_index=results_row,
        keyword_row_index=keyword_row,
        data_start_row_index=data_start,
    )


def make_labels(width: int) -> tuple[str, ...]:
    return tuple(f"{LABEL_PREFIX}{n}" for n in range(1, width + 1))


class TableExtractor:
    """Slices the payload table out of a RawGrid. Stateless apart from config."""

    def __init__(self, config: IngestConfig | None = None) -> None:
        self.config = config or IngestConfig()

    def parse(
        self,
        grid: RawGrid,
        protocol: ProtocolInfo,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> ParsedTable:
        log = log or logger
        extraction = self.config.extraction
        layout = locate_header(grid, extraction)
        log.debug(
            "header structure: results=%d parameter=%d data_start=%d",
            layout.results_row_index + 1,
            layout.keyword_row_index + 1,
            layout.data_start_row_index + 1,
        )

        header_width = grid.row_extent(layout.keyword_row_index)
        data_width = max(
            (grid.row_extent(r) for r in range(layout.data_start_row_index, grid.n_rows)),
            default=0,
        )
        width = min(header_width, data_width)
        if width == 0:
            raise EmptyDataBlockError(
                f"no cells in the data block starting at row {layout.data_start_row_index + 1}"
            )

        severe = False
        if header_width != data_width:
            ratio = abs(header_width - data_width) / max(header_width, data_width)
            severe = ratio > extraction.mismatch_warn_ratio
            if severe:
                log.warning(
                    "column count mismatch: %d header labels vs %d data columns; truncated to %d",
                    header_width, data_width, width,
                )
            else:
                log.info(
                    "header labels (%d) and data columns (%d) differ; truncated to %d",
                    header_width, data_width, width,
                )

        rows = tuple(tuple(row[:width]) for row in grid.rows(layout.data_start_row_index))
        table = ParsedTable(
            column_labels=make_labels(width),
            rows=rows,
            source_protocol=protocol,
            layout=layout,
            header_width=header_width,
            data_width=data_width,
            severe_mismatch=severe,
        )
        log.info("parsing complete: %d data rows, %d columns", table.n_rows, table.n_columns)
        return table
