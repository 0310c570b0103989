from __future__ import annotations

import os
from dataclasses import dataclass, field

"""Config dataclasses for the Nanion export ingestion pipeline.

These are the read-only configuration objects handed to the reader, the
protocol detector, the table extractor and the batch scheduler. The YAML
loader in nanion_ingest.config.loader builds them; every field has a default
so that ``IngestConfig()`` is a usable configuration on its own.
"""


def default_max_workers() -> int:
    """Worker pool size used when none is configured: min(cores, 8)."""
    return max(1, min(os.cpu_count() or 1, 8))


@dataclass(frozen=True)
class ProtocolColumnMap:
    """Static column layout of one protocol variant.

    ``first_columns`` maps a field name to its zero-based column index inside
    the first IV block; later blocks repeat every ``column_stride`` columns.
    """
    column_stride: int
    first_columns: dict[str, int]

    def offsets_for(self, iv_group_count: int) -> dict[str, tuple[int, ...]]:
        """Expand the first-block columns over ``iv_group_count`` blocks."""
        return {
            name: tuple(first + k * self.column_stride for k in range(iv_group_count))
            for name, first in self.first_columns.items()
        }

    def last_column(self, iv_group_count: int) -> int:
        """Highest column index used by ``iv_group_count`` blocks."""
        return max(self.first_columns.values()) + (iv_group_count - 1) * self.column_stride


ACTIVATION_COLUMNS = ProtocolColumnMap(
    column_stride=6,
    first_columns={
        "series_resistance": 5,
        "seal_resistance": 6,
        "capacitance": 7,
        "peak_current": 8,
    },
)

INACTIVATION_COLUMNS = ProtocolColumnMap(
    column_stride=7,
    first_columns={
        "series_resistance": 5,
        "seal_resistance": 6,
        "capacitance": 7,
        "inactivation_current": 8,
        "activation_current": 9,
    },
)


@dataclass(frozen=True)
class AnalysisConfig:
    data_points_per_group: int = 23  # sweeps per IV group


@dataclass(frozen=True)
class ProcessingConfig:
    """Batch execution settings.

    ``timeout_minutes`` is only compared against the elapsed batch time after
    the run; nothing is cancelled when it is exceeded.
    """
    use_parallel: bool = True
    max_workers: int = field(default_factory=default_max_workers)
    timeout_minutes: float = 30


@dataclass(frozen=True)
class IOConfig:
    supported_extensions: tuple[str, ...] = (".xlsx", ".xlsm", ".xls")
    max_file_size_mb: float = 100  # warning threshold only
    min_rows: int = 10
    min_columns: int = 20
    low_density_ratio: float = 0.1


@dataclass(frozen=True)
class DetectionConfig:
    header_rows: int = 15  # rows scanned for protocol keywords
    sweep_count_cell: tuple[int, int] = (1, 1)  # (row, column), zero-based


@dataclass(frozen=True)
class ExtractionConfig:
    results_marker: str = "Results"
    parameter_marker: str = "Parameter"
    data_offset: int = 2  # data rows start this many rows below the parameter row
    mismatch_warn_ratio: float = 0.2


@dataclass(frozen=True)
class IngestConfig:
    """Root configuration object for an ingestion run."""
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    io: IOConfig = field(default_factory=IOConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    activation: ProtocolColumnMap = ACTIVATION_COLUMNS
    inactivation: ProtocolColumnMap = INACTIVATION_COLUMNS
