from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from nanion_ingest.models.error_record import ErrorRecord

"""Error log buffering module.

- JSON Lines, fixed schema (see ErrorRecord)
- One ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per run inside the output directory
- Records are buffered in memory and written by flush(); only the batch
  aggregation phase calls flush, so there is a single writer per file
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    - The file path is fixed on first access
    - Not thread-safe: append/flush are called from the scheduler thread only
    """
    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._directory / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when nothing was buffered."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
