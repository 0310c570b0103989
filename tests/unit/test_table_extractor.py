from __future__ import annotations

import pytest
from conftest import DATA_START_ROW, PARAMETER_ROW, RESULTS_ROW, export_rows

from nanion_ingest.excel.extractor import (
    EmptyDataBlockError,
    ExtractionError,
    HeaderNotFoundError,
    TableExtractor,
    locate_header,
    make_labels,
)
from nanion_ingest.logging.init import setup_logging
from nanion_ingest.models.grid import RawGrid
from nanion_ingest.models.protocol import ProtocolInfo, ProtocolType

PROTOCOL = ProtocolInfo(protocol_type=ProtocolType.ACTIVATION, iv_group_count=2, column_stride=6)


def _parse(rows):
    return TableExtractor().parse(RawGrid.from_rows(rows), PROTOCOL)


def test_locate_header_positions():
    layout = locate_header(RawGrid.from_rows(export_rows()))
    assert layout.results_row_index == RESULTS_ROW
    assert layout.keyword_row_index == PARAMETER_ROW
    assert layout.data_start_row_index == DATA_START_ROW


def test_parse_full_table():
    table = _parse(export_rows(n_data_rows=12, n_columns=30))
    assert table.n_rows == 12
    assert table.n_columns == 30
    assert table.column_labels[0] == "Column_1"
    assert table.column_labels[-1] == "Column_30"
    assert table.rows[0][:3] == ("A01", 1.5, 2.5)
    assert table.rows[11][0] == "A12"
    assert table.source_protocol is PROTOCOL
    assert not table.column_mismatch
    assert not table.severe_mismatch


def test_more_data_columns_than_labels_truncates_to_labels():
    table = _parse(export_rows(n_columns=50, header_columns=45))
    assert table.n_columns == 45
    assert table.header_width == 45
    assert table.data_width == 50
    assert table.column_mismatch
    assert not table.severe_mismatch
    assert all(len(row) == 45 for row in table.rows)


def test_more_labels_than_data_columns_truncates_to_data():
    table = _parse(export_rows(n_columns=25, header_columns=30))
    assert table.n_columns == 25
    assert table.rows[0][-1] == 24.5


def test_severe_mismatch_is_flagged_not_rejected(capsys):
    setup_logging()
    table = _parse(export_rows(n_columns=30, header_columns=20))
    assert table.n_columns == 20
    assert table.severe_mismatch
    assert "column count mismatch" in capsys.readouterr().out


def test_cells_copied_verbatim():
    rows = export_rows(n_data_rows=3)
    rows[DATA_START_ROW][1:4] = ["n/a", 7, None]
    table = _parse(rows)
    assert table.rows[0][1:4] == ("n/a", 7, None)


def test_short_data_rows_are_padded():
    rows = export_rows(n_data_rows=3)
    rows[DATA_START_ROW + 1] = ["A02", 1.0]
    table = _parse(rows)
    assert table.rows[1][:3] == ("A02", 1.0, None)
    assert len(table.rows[1]) == table.n_columns


def test_parameter_marker_must_follow_results_row():
    rows = export_rows(parameter_marker=False)
    rows[RESULTS_ROW] = ["Results", "Parameter"]
    with pytest.raises(HeaderNotFoundError):
        _parse(rows)


def test_missing_results_marker():
    with pytest.raises(HeaderNotFoundError) as exc:
        _parse(export_rows(results_marker=False))
    assert exc.value.error_type == "HEADER_NOT_FOUND"
    assert isinstance(exc.value, ExtractionError)


def test_missing_parameter_marker():
    with pytest.raises(HeaderNotFoundError):
        _parse(export_rows(parameter_marker=False))


def test_no_rows_below_header():
    with pytest.raises(HeaderNotFoundError):
        _parse(export_rows(n_data_rows=0))


def test_blank_data_block():
    rows = export_rows(n_data_rows=0) + [[None] * 29 + [" "]]
    with pytest.raises(EmptyDataBlockError) as exc:
        _parse(rows)
    assert exc.value.error_type == "EMPTY_DATA_BLOCK"


def test_make_labels():
    assert make_labels(3) == ("Column_1", "Column_2", "Column_3")
    assert make_labels(0) == ()


def test_column_accessor():
    table = _parse(export_rows(n_data_rows=2))
    assert table.column("Column_1") == ["A01", "A02"]
