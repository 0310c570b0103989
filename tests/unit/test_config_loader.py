from __future__ import annotations

from pathlib import Path

import pytest

from nanion_ingest.config.loader import ConfigError, build_config, default_config, load_config
from nanion_ingest.models.config_models import (
    ACTIVATION_COLUMNS,
    INACTIVATION_COLUMNS,
    IngestConfig,
    ProtocolColumnMap,
    default_max_workers,
)


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.analysis.data_points_per_group == 23
    assert cfg.processing.use_parallel is False
    assert cfg.processing.max_workers == 2
    assert cfg.processing.timeout_minutes == 5
    assert cfg.io.supported_extensions == (".xlsx",)
    # omitted sections fall back to defaults
    assert cfg.detection.header_rows == 15
    assert cfg.extraction.results_marker == "Results"
    assert cfg.activation == ACTIVATION_COLUMNS


def test_empty_file_gives_defaults(tmp_path: Path):
    f = tmp_path / "empty.yml"
    f.write_text("", encoding="utf-8")
    assert load_config(f) == default_config()


def test_default_config_values():
    cfg = default_config()
    assert cfg == IngestConfig()
    assert cfg.processing.use_parallel is True
    assert cfg.processing.max_workers == default_max_workers()
    assert 1 <= cfg.processing.max_workers <= 8
    assert cfg.processing.timeout_minutes == 30
    assert cfg.io.min_rows == 10
    assert cfg.io.min_columns == 20
    assert cfg.io.max_file_size_mb == 100
    assert cfg.detection.sweep_count_cell == (1, 1)
    assert cfg.extraction.data_offset == 2
    assert cfg.inactivation == INACTIVATION_COLUMNS


def test_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yml")


def test_invalid_yaml(tmp_path: Path):
    f = tmp_path / "bad.yml"
    f.write_text("processing: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(f)


def test_root_must_be_mapping(tmp_path: Path):
    f = tmp_path / "list.yml"
    f.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(f)


def test_protocol_column_map_override():
    cfg = build_config({
        "protocols": {
            "activation": {"column_stride": 6, "first_columns": {"peak_current": 2}},
        },
        "detection": {"sweep_count_cell": [0, 3]},
        "io": {"supported_extensions": [".XLSX"]},
    })
    assert cfg.activation == ProtocolColumnMap(column_stride=6, first_columns={"peak_current": 2})
    assert cfg.inactivation == INACTIVATION_COLUMNS
    assert cfg.detection.sweep_count_cell == (0, 3)
    assert cfg.io.supported_extensions == (".xlsx",)


def test_offsets_for_expands_blocks():
    offsets = INACTIVATION_COLUMNS.offsets_for(3)
    assert offsets["inactivation_current"] == (8, 15, 22)
    assert offsets["activation_current"] == (9, 16, 23)
    assert ACTIVATION_COLUMNS.offsets_for(1)["peak_current"] == (8,)


def test_last_column_matches_offsets():
    for columns in (ACTIVATION_COLUMNS, INACTIVATION_COLUMNS):
        for groups in (1, 4):
            offsets = columns.offsets_for(groups)
            assert columns.last_column(groups) == max(max(v) for v in offsets.values())
