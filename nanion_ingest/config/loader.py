from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    ACTIVATION_COLUMNS,
    INACTIVATION_COLUMNS,
    AnalysisConfig,
    DetectionConfig,
    ExtractionConfig,
    IngestConfig,
    IOConfig,
    ProcessingConfig,
    ProtocolColumnMap,
    default_max_workers,
)

"""Config loader.

Responsibilities:
- Load a YAML config file
- Validate it against config_schema.json (unknown keys rejected)
- Apply defaults for every omitted section/key
- Return the frozen IngestConfig consumed by the pipeline
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the packaged JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the data
            fails schema validation (unknown keys, wrong types, bad ranges).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _column_map(raw: dict[str, Any] | None, default: ProtocolColumnMap) -> ProtocolColumnMap:
    if not raw:
        return default
    return ProtocolColumnMap(
        column_stride=raw["column_stride"],
        first_columns=dict(raw["first_columns"]),
    )


def build_config(data: dict[str, Any]) -> IngestConfig:
    """Build an IngestConfig from an already validated mapping."""
    analysis = data.get("analysis", {})
    processing = data.get("processing", {})
    io = data.get("io", {})
    detection = data.get("detection", {})
    extraction = data.get("extraction", {})
    protocols = data.get("protocols", {})

    io_defaults = IOConfig()
    detection_defaults = DetectionConfig()
    extraction_defaults = ExtractionConfig()

    extensions = io.get("supported_extensions")
    sweep_cell = detection.get("sweep_count_cell")
    return IngestConfig(
        analysis=AnalysisConfig(
            data_points_per_group=analysis.get("data_points_per_group", AnalysisConfig().data_points_per_group),
        ),
        processing=ProcessingConfig(
            use_parallel=processing.get("use_parallel", True),
            max_workers=processing.get("max_workers", default_max_workers()),
            timeout_minutes=processing.get("timeout_minutes", ProcessingConfig().timeout_minutes),
        ),
        io=IOConfig(
            supported_extensions=(
                tuple(e.lower() for e in extensions) if extensions else io_defaults.supported_extensions
            ),
            max_file_size_mb=io.get("max_file_size_mb", io_defaults.max_file_size_mb),
            min_rows=io.get("min_rows", io_defaults.min_rows),
            min_columns=io.get("min_columns", io_defaults.min_columns),
            low_density_ratio=io.get("low_density_ratio", io_defaults.low_density_ratio),
        ),
        detection=DetectionConfig(
            header_rows=detection.get("header_rows", detection_defaults.header_rows),
            sweep_count_cell=tuple(sweep_cell) if sweep_cell else detection_defaults.sweep_count_cell,
        ),
        extraction=ExtractionConfig(
            results_marker=extraction.get("results_marker", extraction_defaults.results_marker),
            parameter_marker=extraction.get("parameter_marker", extraction_defaults.parameter_marker),
            data_offset=extraction.get("data_offset", extraction_defaults.data_offset),
            mismatch_warn_ratio=extraction.get("mismatch_warn_ratio", extraction_defaults.mismatch_warn_ratio),
        ),
        activation=_column_map(protocols.get("activation"), ACTIVATION_COLUMNS),
        inactivation=_column_map(protocols.get("inactivation"), INACTIVATION_COLUMNS),
    )


def default_config() -> IngestConfig:
    return IngestConfig()


def load_config(path: Path) -> IngestConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return build_config(data)
