from __future__ import annotations

import json

import jsonschema
import pytest

from nanion_ingest.config.loader import SCHEMA_PATH, ConfigError, _validate_config_schema

"""Contract: config_schema.json accepts the documented keys and nothing else."""


def _schema():
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_schema_file_is_valid_json_schema():
    schema = _schema()
    jsonschema.Draft202012Validator.check_schema(schema)
    assert set(schema["properties"]) == {"analysis", "processing", "io", "detection", "extraction", "protocols"}


def test_full_config_accepted():
    _validate_config_schema({
        "analysis": {"data_points_per_group": 23},
        "processing": {"use_parallel": True, "max_workers": 8, "timeout_minutes": 30},
        "io": {"supported_extensions": [".xlsx", ".xls"], "max_file_size_mb": 100, "min_rows": 10,
               "min_columns": 20, "low_density_ratio": 0.1},
        "detection": {"header_rows": 15, "sweep_count_cell": [1, 1]},
        "extraction": {"results_marker": "Results", "parameter_marker": "Parameter", "data_offset": 2,
                       "mismatch_warn_ratio": 0.2},
        "protocols": {
            "activation": {"column_stride": 6, "first_columns": {"peak_current": 8}},
            "inactivation": {"column_stride": 7, "first_columns": {"inactivation_current": 8}},
        },
    })


@pytest.mark.parametrize(
    "data",
    [
        {"unknown_section": {}},
        {"processing": {"workers": 4}},
        {"processing": {"max_workers": 0}},
        {"processing": {"use_parallel": "yes"}},
        {"analysis": {"data_points_per_group": 0}},
        {"io": {"supported_extensions": ["xlsx"]}},
        {"io": {"low_density_ratio": 1.5}},
        {"detection": {"sweep_count_cell": [1]}},
        {"extraction": {"results_marker": ""}},
        {"protocols": {"activation": {"column_stride": 6}}},
        {"protocols": {"activation": {"column_stride": 6, "first_columns": {"peak_current": -1}}}},
        {"protocols": {"activation": {"column_stride": 7, "first_columns": {"peak_current": 8}}}},
        {"protocols": {"inactivation": {"column_stride": 6, "first_columns": {"inactivation_current": 8}}}},
        {"protocols": {"activation": {"column_stride": 12, "first_columns": {"peak_current": 8}}}},
    ],
)
def test_invalid_configs_rejected(data):
    with pytest.raises(ConfigError, match="config validation failed"):
        _validate_config_schema(data)
