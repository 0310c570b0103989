# Shared pytest fixtures: synthetic Nanion exports built with pandas + openpyxl
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from nanion_ingest.logging.init import reset_logging

PROTOCOL_ROWS = {
    "activation": ["Protocol", "IV Peak"],
    "inactivation": ["Protocol", "Inact", "Act"],
    "none": ["Protocol", "Ramp"],
}

# zero-based row positions produced by export_rows()
RESULTS_ROW = 4
PARAMETER_ROW = 5
DATA_START_ROW = 7


def export_rows(
    protocol: str = "activation",
    total_sweeps: Any = 46,
    n_data_rows: int = 12,
    n_columns: int = 30,
    header_columns: int | None = None,
    results_marker: bool = True,
    parameter_marker: bool = True,
) -> list[list[Any]]:
    """Cell grid of a synthetic export.

    Row layout (zero-based): 0 title, 1 sweeps, 2 protocol, 3 date,
    4 results marker, 5 parameter labels, 6 units, 7+ data.
    No row is left completely blank.
    """
    header_columns = n_columns if header_columns is None else header_columns
    labels = ["Parameter" if parameter_marker else "Label"]
    labels.extend(f"P{n}" for n in range(2, header_columns + 1))
    rows: list[list[Any]] = [
        ["Nanion SyncroPatch 384 export", "Chip 1"],
        ["Sweeps", total_sweeps],
        list(PROTOCOL_ROWS[protocol]),
        ["Date", "2024-03-01"],
        ["Results" if results_marker else "Summary"],
        labels,
        ["Unit"] + ["pA"] * (header_columns - 1),
    ]
    for i in range(n_data_rows):
        rows.append([f"A{i + 1:02d}"] + [i * 100 + c + 0.5 for c in range(1, n_columns)])
    return rows


def write_export(path: Path, rows: list[list[Any]]) -> Path:
    width = max((len(r) for r in rows), default=0)
    frame = pd.DataFrame([r + [None] * (width - len(r)) for r in rows])
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name="Results", header=False, index=False)
    return path


@pytest.fixture(autouse=True)
def clean_logging():
    # the stdout handler binds sys.stdout at setup; rebuild it per test
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def make_export(tmp_path: Path) -> Callable[..., Path]:
    """Factory: make_export("name.xlsx", protocol=..., ...) -> path under tmp_path/data."""
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)

    def _make(name: str, **kwargs: Any) -> Path:
        return write_export(data_dir / name, export_rows(**kwargs))

    return _make


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "out"


@pytest.fixture()
def sample_config_yaml() -> str:
    return """analysis:
  data_points_per_group: 23
processing:
  use_parallel: false
  max_workers: 2
  timeout_minutes: 5
io:
  supported_extensions: [".xlsx"]
  min_rows: 10
  min_columns: 20
"""


@pytest.fixture()
def write_config(tmp_path: Path, sample_config_yaml: str) -> Path:
    cfg = tmp_path / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
