from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..models.config_models import IOConfig
from ..models.grid import RawGrid

"""Workbook reader: one file in, one RawGrid out.

The first worksheet is read once with pandas, without a header row, so the
grid keeps every cell of the export. There is no second decoder: any read
failure is fatal for that file and is not retried.
"""

logger = logging.getLogger(__name__)


class StructuralFileError(Exception):
    """Base class for unreadable, unsupported or malformed workbooks."""
    error_type = "STRUCTURAL_FILE_ERROR"

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class SourceFileNotFoundError(StructuralFileError):
    error_type = "FILE_NOT_FOUND"


class UnsupportedFormatError(StructuralFileError):
    error_type = "UNSUPPORTED_FORMAT"


class ReadFailedError(StructuralFileError):
    error_type = "READ_FAILED"


class EmptyFileError(StructuralFileError):
    error_type = "EMPTY_FILE"


class InsufficientShapeError(StructuralFileError):
    error_type = "INSUFFICIENT_SHAPE"


def _check_file(path: Path, io_config: IOConfig, log: logging.Logger | logging.LoggerAdapter) -> float:
    """Pre-read validation; returns the file size in MB."""
    if not path.exists():
        raise SourceFileNotFoundError(f"file not found: {path}", path)
    if not path.is_file():
        raise SourceFileNotFoundError(f"not a regular file: {path}", path)

    suffix = path.suffix.lower()
    if suffix not in io_config.supported_extensions:
        raise UnsupportedFormatError(
            f"unsupported file format '{path.suffix}' (supported: {', '.join(io_config.supported_extensions)})",
            path,
        )

    size_bytes = path.stat().st_size
    if size_bytes == 0:
        raise EmptyFileError(f"file is empty (0 bytes): {path.name}", path)

    size_mb = size_bytes / (1024 * 1024)
    if size_mb > io_config.max_file_size_mb:
        log.warning("large file detected: %.1f MB (threshold %.1f MB)", size_mb, io_config.max_file_size_mb)
    return size_mb


def _check_grid(grid: RawGrid, path: Path, io_config: IOConfig, log: logging.Logger | logging.LoggerAdapter) -> None:
    """Post-read structural validation."""
    n_rows, n_cols = grid.shape
    non_missing = grid.non_missing_count() if n_rows and n_cols else 0
    if non_missing == 0:
        raise EmptyFileError(f"file contains no data: {path.name}", path)

    if n_rows < io_config.min_rows or n_cols < io_config.min_columns:
        raise InsufficientShapeError(
            f"grid is {n_rows}x{n_cols}, need at least {io_config.min_rows} rows and "
            f"{io_config.min_columns} columns",
            path,
        )

    density = non_missing / (n_rows * n_cols)
    if density < io_config.low_density_ratio:
        log.warning("low data density (%.1f%%)", density * 100)
    log.debug("data validation passed: %.1f%% density", density * 100)


def read_grid(
    path: Path,
    io_config: IOConfig | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> RawGrid:
    """Read the first worksheet of ``path`` into a RawGrid.

    Raises:
        SourceFileNotFoundError: path missing or not a file
        UnsupportedFormatError: extension outside ``io_config.supported_extensions``
        ReadFailedError: the spreadsheet parser failed (no fallback attempted)
        EmptyFileError: no non-missing cell in the sheet
        InsufficientShapeError: fewer than ``min_rows`` rows or ``min_columns`` columns
    """
    io_config = io_config or IOConfig()
    log = log or logger
    path = Path(path)

    size_mb = _check_file(path, io_config, log)
    log.debug("reading %s (%.2f MB)", path.name, size_mb)

    try:
        with pd.ExcelFile(path) as xls:
            if not xls.sheet_names:
                raise EmptyFileError(f"workbook has no sheets: {path.name}", path)
            frame = xls.parse(xls.sheet_names[0], header=None)
    except StructuralFileError:
        raise
    except Exception as e:
        raise ReadFailedError(f"reading {path.name} failed: {e}", path) from e

    grid = RawGrid.from_frame(frame)
    _check_grid(grid, path, io_config, log)
    log.info("read %dx%d grid", grid.n_rows, grid.n_columns)
    return grid


class FileReader:
    """Stateless facade over read_grid bound to one IOConfig."""

    def __init__(self, io_config: IOConfig | None = None) -> None:
        self.io_config = io_config or IOConfig()

    def read(self, path: Path, log: logging.Logger | logging.LoggerAdapter | None = None) -> RawGrid:
        return read_grid(path, self.io_config, log)
